"""
Pytest configuration and fixtures for the content audit engine.

Использование:
    pytest tests/ -v
"""

import os
import sys
from datetime import datetime, timedelta, timezone

import pytest


def pytest_sessionstart(session):  # type: ignore[override]
    """Добавить корень проекта в sys.path перед запуском тестов."""
    tests_dir = os.path.dirname(os.path.abspath(__file__))
    project_root = os.path.dirname(tests_dir)

    if project_root not in sys.path:
        sys.path.insert(0, project_root)


FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


# ═══════════════════════════════════════════════════════
# CLOCK & ARTICLES
# ═══════════════════════════════════════════════════════

@pytest.fixture
def clock():
    """Fixed clock so article ages are deterministic."""
    return lambda: FIXED_NOW


@pytest.fixture
def make_article():
    """Factory for articles; ``age_days`` sets last_modified relative to FIXED_NOW."""
    from content_audit.core.models import Article

    def _make(
        content="",
        article_id="a1",
        title="Resetting Your Account Password Safely",
        age_days=10,
        tags=(),
        category=None,
        description="How to reset a forgotten password.",
        excerpt=None,
    ):
        return Article(
            id=article_id,
            title=title,
            content=content,
            last_modified=FIXED_NOW - timedelta(days=age_days),
            tags=tuple(tags),
            category=category,
            description=description,
            excerpt=excerpt,
        )

    return _make


@pytest.fixture
def make_context(clock):
    """Build an ExecutionContext for an article against the fixed clock."""
    from content_audit.core.context import ExecutionContextBuilder

    builder = ExecutionContextBuilder(clock)
    return builder.build


# ═══════════════════════════════════════════════════════
# ENGINE
# ═══════════════════════════════════════════════════════

@pytest.fixture
def registry():
    from content_audit.registry import create_default_registry
    return create_default_registry()


@pytest.fixture
def engine_config():
    from content_audit.config import EngineConfig
    return EngineConfig(max_concurrency=2, audit_timeout_seconds=10.0, stats_sample_size=10)


@pytest.fixture
def engine(registry, engine_config, clock):
    from content_audit.engine import RulesEngine
    return RulesEngine(registry, engine_config, clock=clock)


# ═══════════════════════════════════════════════════════
# SAMPLE CONTENT
# ═══════════════════════════════════════════════════════

# 20 words, one paragraph, no headings
SHORT_UNSTRUCTURED = "The cat sat on the mat. The dog ran to the park. We like to read books. It is fun."

SUPPORT_PARAGRAPH = (
    "Our support team reviews every ticket within one business day and replies "
    "with clear steps that help customers solve billing problems quickly."
)

WELL_FORMED = """# Resetting Your Password

You can reset your password from the sign in page. Open the page and choose the reset option.

## Steps

- Open the sign in page
- Choose the reset option
- Follow the link in your email

See the [account settings guide](/docs/account-settings) for more help with your profile.
"""
