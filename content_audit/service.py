"""
Audit service: the operations exposed to the HTTP layer and the CLI.

Combines the rule registry, the engine and an article store.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .config import EngineConfig
from .core.errors import ArticleNotFoundError
from .core.models import (
    ArticleAuditFailure,
    AuditResult,
    BatchAuditResult,
    Category,
    RuleMetadata,
    Severity,
)
from .engine import RulesEngine
from .registry import RuleRegistry, create_default_registry
from .store import ArticleStore

logger = logging.getLogger(__name__)

DEFAULT_BATCH_LIMIT = 10
MAX_BATCH_LIMIT = 50


class AuditService:
    """Сервис аудита контента."""

    def __init__(
        self,
        store: ArticleStore,
        registry: Optional[RuleRegistry] = None,
        config: Optional[EngineConfig] = None,
        engine: Optional[RulesEngine] = None,
    ):
        """
        Args:
            store: Хранилище статей
            registry: Реестр правил (по умолчанию встроенные правила)
            config: Конфигурация движка
            engine: Готовый движок (перекрывает registry и config)
        """
        self.store = store
        if engine is None:
            engine = RulesEngine(registry or create_default_registry(), config)
        self.engine = engine
        self.registry = engine.registry
        self.config = engine.config

    async def list_rules(
        self,
        category: Optional[Union[Category, str]] = None,
        enabled: Optional[bool] = None,
        tag: Optional[str] = None,
    ) -> List[RuleMetadata]:
        return self.registry.list_metadata(category=category, enabled=enabled, tag=tag)

    async def rules_by_category(self) -> Dict[str, List[RuleMetadata]]:
        return self.registry.rules_by_category()

    async def get_rule(self, rule_id: str) -> RuleMetadata:
        """Raises RuleNotFoundError for an unknown id."""
        return self.registry.get_rule(rule_id).get_metadata()

    async def update_rule_config(self, rule_id: str, partial: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Обновить конфигурацию правила.

        Returns:
            ``{"success": bool, "rule_id": ..., "config": ...}``; config is the
            rule's config after the call (unchanged when rejected)
        """
        success = self.registry.update_rule_config(rule_id, partial)
        rule = self.registry.get_rule(rule_id)
        return {
            "success": success,
            "rule_id": rule_id,
            "config": dict(rule.config),
        }

    async def audit_article(
        self,
        article_id: str,
        rules: Optional[Iterable[str]] = None,
        min_severity: Optional[Union[Severity, str]] = None,
    ) -> AuditResult:
        """Raises ArticleNotFoundError for an unknown id."""
        article = await self.store.get_article(article_id)
        return await asyncio.to_thread(self.engine.audit_article, article, rules, min_severity)

    async def audit_articles(
        self,
        article_ids: Optional[Iterable[str]] = None,
        rules: Optional[Iterable[str]] = None,
        min_severity: Optional[Union[Severity, str]] = None,
        category: Optional[str] = None,
        limit: int = DEFAULT_BATCH_LIMIT,
    ) -> BatchAuditResult:
        """
        Пакетный аудит статей из хранилища.

        Explicit ``article_ids`` win; unknown ids become failures in the result.
        Without ids the batch is every article in ``category``, or else the
        first ``limit`` stored articles (at most 50).
        """
        if article_ids is None:
            if category is not None:
                articles = await self.store.list_articles(category=category)
            else:
                articles = await self.store.list_articles(limit=min(max(limit, 0), MAX_BATCH_LIMIT))
            logger.info(f"Selected {len(articles)} stored articles (category={category}, limit={limit})")
            return await self.engine.audit_articles(articles, rule_ids=rules, min_severity=min_severity)

        articles = []
        failures = []
        for article_id in article_ids:
            try:
                articles.append(await self.store.get_article(article_id))
            except ArticleNotFoundError as e:
                logger.warning(f"Skipping article {article_id}: not found")
                failures.append(ArticleAuditFailure(
                    article_id=article_id,
                    reason=str(e),
                    error_type=type(e).__name__,
                ))

        return await self.engine.audit_articles(
            articles,
            rule_ids=rules,
            min_severity=min_severity,
            failures=failures,
        )

    async def get_stats(self) -> Dict[str, Any]:
        """
        Rule counts by state and category, plus a sample audit over up to
        ``stats_sample_size`` stored articles.
        """
        rules = self.registry.list_rules()
        categories: Dict[str, int] = {}
        for rule in rules:
            categories[rule.category.value] = categories.get(rule.category.value, 0) + 1

        sample = await self.store.list_articles(limit=self.config.stats_sample_size)
        batch = await self.engine.audit_articles(sample)
        scores = [result.content_health_score for result in batch.results]

        return {
            "total_rules": len(rules),
            "enabled_rules": sum(1 for rule in rules if rule.enabled),
            "configurable_rules": sum(1 for rule in rules if rule.configurable),
            "rule_categories": categories,
            "sample_audit": {
                "articles_audited": batch.summary.total_articles,
                "total_issues": batch.summary.total_issues,
                "average_issues_per_article": batch.summary.average_issues_per_article,
                "average_health_score": (sum(scores) / len(scores)) if scores else None,
                "severity_breakdown": batch.summary.severity_breakdown,
            },
        }

