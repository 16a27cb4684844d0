"""
Tests for the rules engine orchestrator.
"""

import threading
import time

import pytest

from conftest import SHORT_UNSTRUCTURED, SUPPORT_PARAGRAPH

from content_audit.config import EngineConfig
from content_audit.core.base_rule import BaseRule
from content_audit.core.models import Category, Severity
from content_audit.engine import RulesEngine, calculate_health_score, summarize
from content_audit.registry import RuleRegistry


class ExplodingRule(BaseRule):
    def __init__(self):
        super().__init__(
            rule_id="exploding-rule",
            name="Exploding Rule",
            description="Always raises",
            category=Category.TECHNICAL,
            severity=Severity.LOW,
        )

    def execute(self, context):
        raise RuntimeError("boom")


class SlowRule(BaseRule):
    def __init__(self, delay):
        super().__init__(
            rule_id="slow-rule",
            name="Slow Rule",
            description="Sleeps before passing",
            category=Category.TECHNICAL,
            severity=Severity.LOW,
        )
        self.delay = delay

    def execute(self, context):
        time.sleep(self.delay)
        return None



class TrackingRule(BaseRule):
    """Sleeps per article id and records how many executions overlap."""

    def __init__(self, delays):
        super().__init__(
            rule_id="tracking-rule",
            name="Tracking Rule",
            description="Counts concurrent executions",
            category=Category.TECHNICAL,
            severity=Severity.LOW,
        )
        self.delays = delays
        self.active = 0
        self.peak = 0
        self._lock = threading.Lock()

    def execute(self, context):
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            time.sleep(self.delays.get(context.article.id, 0))
        finally:
            with self._lock:
                self.active -= 1
        return None


# ═══════════════════════════════════════════════════════
# HEALTH SCORE
# ═══════════════════════════════════════════════════════

class TestHealthScore:

    @pytest.mark.parametrize("issues, total, expected", [
        (0, 5, 100),
        (1, 5, 88),
        (3, 4, 55),
        (5, 5, 40),
        (0, 0, 75),
    ])
    def test_values(self, issues, total, expected):
        assert calculate_health_score(issues, total) == expected


# ═══════════════════════════════════════════════════════
# SINGLE ARTICLE
# ═══════════════════════════════════════════════════════

class TestAuditArticle:

    def test_short_stale_article(self, engine, make_article):
        article = make_article(SHORT_UNSTRUCTURED, age_days=600)
        result = engine.audit_article(article)

        by_rule = {issue.rule_id: issue for issue in result.issues}
        assert by_rule["stale-content"].severity == Severity.CRITICAL
        assert by_rule["content-quality"].issue == "Lacks proper structure"
        assert by_rule["content-quality"].severity == Severity.HIGH

        assert result.total_rules_executed == 5
        assert result.issues_found == len(result.issues)
        assert result.issues_found == sum(r.issues_count for r in result.rule_results)
        assert result.content_health_score == calculate_health_score(result.issues_found, 5)

    def test_rule_results_follow_registry_order(self, engine, make_article):
        result = engine.audit_article(make_article(SHORT_UNSTRUCTURED))
        assert [r.rule_id for r in result.rule_results] == [
            "stale-content",
            "broken-links",
            "content-quality",
            "duplicate-content",
            "seo-optimization",
        ]

    def test_passing_rule_result(self, engine, make_article):
        result = engine.audit_article(make_article("No links here at all."))
        links = next(r for r in result.rule_results if r.rule_id == "broken-links")

        assert links.passed is True
        assert links.issues_count == 0
        assert links.error is None

    def test_rule_allowlist(self, engine, make_article):
        result = engine.audit_article(make_article(SHORT_UNSTRUCTURED), rule_ids=["seo-optimization"])
        assert result.total_rules_executed == 1
        assert [r.rule_id for r in result.rule_results] == ["seo-optimization"]

    def test_empty_allowlist_runs_nothing(self, engine, make_article):
        result = engine.audit_article(make_article(SHORT_UNSTRUCTURED), rule_ids=[])

        assert result.total_rules_executed == 0
        assert result.issues == []
        assert result.content_health_score == 75

    def test_min_severity_filters_issues_not_rules(self, engine, make_article):
        result = engine.audit_article(make_article(SHORT_UNSTRUCTURED, age_days=600), min_severity="high")

        assert result.total_rules_executed == 5
        assert result.issues
        assert all(issue.severity.rank >= Severity.HIGH.rank for issue in result.issues)
        assert result.issues_found == sum(1 for r in result.rule_results if not r.passed)

    def test_min_severity_critical_keeps_critical_issue(self, engine, make_article):
        article = make_article(SHORT_UNSTRUCTURED, age_days=600)
        result = engine.audit_article(article, min_severity="critical")

        assert [issue.issue for issue in result.issues] == ["Critically outdated content"]
        assert result.total_rules_executed == 5

        quality = next(r for r in result.rule_results if r.rule_id == "content-quality")
        assert quality.passed is True
        assert quality.issues_count == 0
        assert result.content_health_score == calculate_health_score(1, 5)

    def test_disabled_rules_do_not_run(self, engine, registry, make_article):
        registry.disable_rule("seo-optimization")
        result = engine.audit_article(make_article(SHORT_UNSTRUCTURED))
        assert "seo-optimization" not in [r.rule_id for r in result.rule_results]
        assert result.total_rules_executed == 4

    def test_failing_rule_does_not_abort_audit(self, registry, clock, make_article):
        registry.register(ExplodingRule())
        engine = RulesEngine(registry, clock=clock)

        result = engine.audit_article(make_article(SHORT_UNSTRUCTURED, age_days=600))

        assert result.total_rules_executed == 6
        assert len(result.execution_errors) == 1
        error = result.execution_errors[0]
        assert error.rule_id == "exploding-rule"
        assert error.error_type == "RuntimeError"
        assert error.message == "boom"

        failed = next(r for r in result.rule_results if r.rule_id == "exploding-rule")
        assert failed.passed is False
        assert failed.issues_count == 0
        assert "boom" in failed.error

        assert any(issue.rule_id == "stale-content" for issue in result.issues)
        assert result.issues_found == sum(r.issues_count for r in result.rule_results)

    def test_failing_rule_is_logged(self, clock, make_article, caplog):
        engine = RulesEngine(RuleRegistry([ExplodingRule()]), clock=clock)
        with caplog.at_level("ERROR", logger="content_audit.engine"):
            engine.audit_article(make_article("text", article_id="art-9"))

        assert "exploding-rule" in caplog.text
        assert "art-9" in caplog.text


# ═══════════════════════════════════════════════════════
# BATCH
# ═══════════════════════════════════════════════════════

class TestAuditArticles:

    @pytest.mark.asyncio
    async def test_empty_batch(self, engine):
        batch = await engine.audit_articles([], rule_ids=[])

        assert batch.results == []
        assert batch.failures == []
        summary = batch.summary
        assert summary.total_articles == 0
        assert summary.total_issues == 0
        assert summary.articles_with_issues == 0
        assert summary.average_issues_per_article == 0.0
        assert summary.severity_breakdown == {
            "critical": 0, "high": 0, "medium": 0, "low": 0, "info": 0,
        }
        assert summary.category_breakdown == {}
        assert summary.most_common_issues == []

    @pytest.mark.asyncio
    async def test_results_keep_input_order(self, engine, make_article):
        articles = [
            make_article(SHORT_UNSTRUCTURED, article_id=f"a{i}", age_days=100 * i)
            for i in range(6)
        ]
        batch = await engine.audit_articles(articles)

        assert [r.article_id for r in batch.results] == [f"a{i}" for i in range(6)]
        assert batch.summary.total_articles == 6
        assert batch.summary.total_issues == sum(r.issues_found for r in batch.results)

    @pytest.mark.asyncio
    async def test_duplicate_paragraph_batch_summary(self, engine, make_article):
        articles = [
            make_article(f"{SUPPORT_PARAGRAPH}\n\n{SUPPORT_PARAGRAPH}", article_id="dup"),
            make_article(SHORT_UNSTRUCTURED, article_id="short"),
        ]
        batch = await engine.audit_articles(articles, rule_ids=["duplicate-content"])

        assert batch.summary.total_issues == 1
        assert batch.summary.articles_with_issues == 1
        assert batch.summary.average_issues_per_article == 0.5
        assert batch.summary.severity_breakdown["high"] == 1
        assert batch.summary.category_breakdown == {"content-quality": 1}
        assert batch.summary.most_common_issues[0].issue == "Duplicate sentences found"

    @pytest.mark.asyncio
    async def test_timeout_becomes_failure(self, clock, make_article):
        registry = RuleRegistry([SlowRule(delay=0.5)])
        config = EngineConfig(max_concurrency=2, audit_timeout_seconds=0.05)
        engine = RulesEngine(registry, config, clock=clock)

        batch = await engine.audit_articles([make_article("text", article_id="slow")])

        assert batch.results == []
        assert len(batch.failures) == 1
        assert batch.failures[0].article_id == "slow"
        assert batch.failures[0].error_type == "TimeoutError"
        assert batch.summary.total_articles == 0

    @pytest.mark.asyncio
    async def test_timed_out_worker_keeps_its_slot(self, clock, make_article):
        rule = TrackingRule({"slow": 0.3})
        config = EngineConfig(max_concurrency=1, audit_timeout_seconds=0.1)
        engine = RulesEngine(RuleRegistry([rule]), config, clock=clock)

        batch = await engine.audit_articles([
            make_article("text", article_id="slow"),
            make_article("text", article_id="fast"),
        ])

        assert [f.article_id for f in batch.failures] == ["slow"]
        assert [r.article_id for r in batch.results] == ["fast"]
        assert rule.peak == 1

    @pytest.mark.asyncio
    async def test_known_failures_are_carried(self, engine, make_article):
        from content_audit.core.models import ArticleAuditFailure

        known = ArticleAuditFailure("missing", "Article 'missing' not found", "ArticleNotFoundError")
        batch = await engine.audit_articles([make_article("text")], failures=[known])

        assert batch.failures == [known]
        assert len(batch.results) == 1


class TestSummarize:

    def test_most_common_issues_limit(self, engine, make_article):
        results = [
            engine.audit_article(make_article(SHORT_UNSTRUCTURED, article_id=f"a{i}", age_days=600))
            for i in range(3)
        ]
        summary = summarize(results, most_common_limit=2)

        assert len(summary.most_common_issues) == 2
        assert summary.most_common_issues[0].count == 3
        assert sum(summary.severity_breakdown.values()) == summary.total_issues
