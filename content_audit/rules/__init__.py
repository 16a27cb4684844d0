"""
Built-in audit rules.

Contains:
- StaleContentRule - устаревший контент
- QualityRule - читаемость, структура, грамматика
- DuplicateContentRule - повторы внутри статьи
- BrokenLinksRule - битые и проблемные ссылки
- SEORule - SEO-оптимизация
"""

from typing import List

from ..core.base_rule import BaseRule
from .broken_links import BrokenLinksRule
from .duplicate_content import DuplicateContentRule
from .quality import QualityRule
from .seo import SEORule
from .stale_content import StaleContentRule

BUILTIN_RULES = (
    StaleContentRule,
    BrokenLinksRule,
    QualityRule,
    DuplicateContentRule,
    SEORule,
)


def create_builtin_rules() -> List[BaseRule]:
    """Fresh instances of every built-in rule, each with its default config."""
    return [rule_class() for rule_class in BUILTIN_RULES]


__all__ = [
    "BUILTIN_RULES",
    "BrokenLinksRule",
    "DuplicateContentRule",
    "QualityRule",
    "SEORule",
    "StaleContentRule",
    "create_builtin_rules",
]
