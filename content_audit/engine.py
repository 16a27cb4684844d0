"""
Rules engine orchestrator.

Features:
- Single-article audit with per-rule error isolation
- Content health scoring
- Concurrent batch audit with a bounded worker count and per-article timeout
- Batch summary statistics
"""

import asyncio
import logging
import time
from collections import Counter
from typing import Iterable, List, Optional, Sequence, Union

from .config import EngineConfig
from .core.base_rule import BaseRule
from .core.context import Clock, ExecutionContextBuilder
from .core.models import (
    Article,
    ArticleAuditFailure,
    AuditResult,
    BatchAuditResult,
    BatchAuditSummary,
    Issue,
    MostCommonIssue,
    RuleExecutionError,
    RuleResult,
    Severity,
)
from .core.text import round_half_up
from .registry import RuleRegistry

logger = logging.getLogger(__name__)

DEFAULT_HEALTH_SCORE = 75
MIN_HEALTH_SCORE = 40
HEALTH_SCORE_SPAN = 60


def calculate_health_score(issues_found: int, total_rules_executed: int) -> int:
    """100 for a clean article, falling with the share of rules that found issues, floor 40."""
    if total_rules_executed <= 0:
        return DEFAULT_HEALTH_SCORE
    score = round_half_up(100 - (issues_found / total_rules_executed) * HEALTH_SCORE_SPAN)
    return max(MIN_HEALTH_SCORE, score)


def summarize(results: Sequence[AuditResult], most_common_limit: int = 5) -> BatchAuditSummary:
    """Fold audit results into batch summary statistics."""
    total_articles = len(results)
    total_issues = sum(result.issues_found for result in results)

    severity_breakdown = {severity.value: 0 for severity in Severity}
    category_breakdown: Counter = Counter()
    titles: Counter = Counter()

    for result in results:
        for issue in result.issues:
            severity_breakdown[issue.severity.value] += 1
            category = issue.category.value if issue.category else "general"
            category_breakdown[category] += 1
            titles[issue.issue] += 1

    return BatchAuditSummary(
        total_articles=total_articles,
        total_issues=total_issues,
        articles_with_issues=sum(1 for result in results if result.issues_found > 0),
        average_issues_per_article=(total_issues / total_articles) if total_articles else 0.0,
        severity_breakdown=severity_breakdown,
        category_breakdown=dict(category_breakdown),
        most_common_issues=[
            MostCommonIssue(issue=title, count=count)
            for title, count in titles.most_common(most_common_limit)
        ],
    )


class RulesEngine:
    """Оркестратор выполнения правил над статьями."""

    def __init__(
        self,
        registry: RuleRegistry,
        config: Optional[EngineConfig] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Args:
            registry: Реестр правил
            config: Конфигурация движка
            clock: Источник текущего времени (для расчёта возраста статей)
        """
        self.registry = registry
        self.config = config or EngineConfig()
        self.context_builder = ExecutionContextBuilder(clock)

    def select_rules(self, rule_ids: Optional[Iterable[str]] = None) -> List[BaseRule]:
        """
        Enabled rules to run, in registry order.

        ``rule_ids`` restricts the run to an allowlist (unknown ids are ignored,
        an empty allowlist selects nothing).
        """
        rules = self.registry.list_rules(enabled=True)

        if rule_ids is not None:
            allowed = set(rule_ids)
            unknown = allowed - {rule.id for rule in self.registry}
            if unknown:
                logger.warning(f"Ignoring unknown rule ids: {sorted(unknown)}")
            rules = [rule for rule in rules if rule.id in allowed]

        return rules

    def audit_article(
        self,
        article: Article,
        rule_ids: Optional[Iterable[str]] = None,
        min_severity: Optional[Union[Severity, str]] = None,
    ) -> AuditResult:
        """
        Run the selected rules against one article.

        With ``min_severity`` set, an issue ranking below it is dropped and its
        rule is recorded as passed.
        """
        start_time = time.perf_counter()
        minimum = Severity.parse(min_severity) if min_severity is not None else None
        context = self.context_builder.build(article)
        rules = self.select_rules(rule_ids)

        issues: List[Issue] = []
        rule_results: List[RuleResult] = []
        errors: List[RuleExecutionError] = []

        for rule in rules:
            rule_start = time.perf_counter()
            try:
                issue = rule.execute(context)
            except Exception as e:
                duration_ms = (time.perf_counter() - rule_start) * 1000
                logger.error(
                    f"Rule {rule.id} failed on article {article.id}: {type(e).__name__}: {e}",
                    exc_info=True,
                )
                errors.append(RuleExecutionError(
                    rule_id=rule.id,
                    rule_name=rule.name,
                    error_type=type(e).__name__,
                    message=str(e),
                ))
                rule_results.append(RuleResult(
                    rule_id=rule.id,
                    rule_name=rule.name,
                    passed=False,
                    issues_count=0,
                    execution_time_ms=duration_ms,
                    error=f"{type(e).__name__}: {e}",
                ))
                continue

            duration_ms = (time.perf_counter() - rule_start) * 1000
            if issue is not None and minimum is not None and issue.severity.rank < minimum.rank:
                logger.debug(
                    f"Dropping {issue.severity.value} issue from {rule.id} on article {article.id}: "
                    f"below {minimum.value}"
                )
                issue = None

            if issue is None:
                rule_results.append(RuleResult(rule.id, rule.name, True, 0, duration_ms))
            else:
                issues.append(issue)
                rule_results.append(RuleResult(rule.id, rule.name, False, 1, duration_ms))

        duration_ms = (time.perf_counter() - start_time) * 1000
        result = AuditResult(
            article_id=article.id,
            article_title=article.title,
            total_rules_executed=len(rules),
            issues_found=len(issues),
            issues=issues,
            rule_results=rule_results,
            execution_time_ms=duration_ms,
            content_health_score=calculate_health_score(len(issues), len(rules)),
            execution_errors=errors,
        )

        logger.info(
            f"Audited article {article.id}: "
            f"rules={len(rules)}, issues={len(issues)}, errors={len(errors)}, "
            f"health={result.content_health_score}, duration={duration_ms:.2f}ms"
        )
        return result

    async def audit_articles(
        self,
        articles: Sequence[Article],
        rule_ids: Optional[Iterable[str]] = None,
        min_severity: Optional[Union[Severity, str]] = None,
        failures: Optional[List[ArticleAuditFailure]] = None,
    ) -> BatchAuditResult:
        """
        Audit many articles concurrently.

        Each article runs in a worker thread; at most ``max_concurrency`` threads
        run at once. An article exceeding ``audit_timeout_seconds`` is reported
        as a failure and the rest of the batch continues; its thread keeps its
        slot until it returns. Results keep input order.

        Args:
            articles: Статьи для аудита
            rule_ids: Разрешённые правила (None = все включённые)
            min_severity: Минимальная серьёзность проблем
            failures: Уже известные сбои (например, ненайденные статьи)
        """
        start_time = time.perf_counter()
        rule_ids = list(rule_ids) if rule_ids is not None else None
        failures = list(failures or [])

        if not articles:
            logger.info("Batch audit requested with no articles")
        else:
            logger.info(
                f"Auditing {len(articles)} articles "
                f"(max_concurrency={self.config.max_concurrency}, "
                f"timeout={self.config.audit_timeout_seconds})..."
            )

        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def run_one(article: Article) -> Union[AuditResult, ArticleAuditFailure]:
            await semaphore.acquire()
            worker = asyncio.ensure_future(
                asyncio.to_thread(self.audit_article, article, rule_ids, min_severity)
            )
            # slot is freed when the thread returns, not when the wait times out
            worker.add_done_callback(lambda _: semaphore.release())
            try:
                return await asyncio.wait_for(
                    asyncio.shield(worker),
                    timeout=self.config.audit_timeout_seconds,
                )
            except asyncio.TimeoutError:
                logger.error(
                    f"Audit of article {article.id} timed out after "
                    f"{self.config.audit_timeout_seconds}s"
                )
                return ArticleAuditFailure(
                    article_id=article.id,
                    reason=f"Audit exceeded timeout of {self.config.audit_timeout_seconds} seconds",
                    error_type="TimeoutError",
                )

        outcomes = await asyncio.gather(*(run_one(article) for article in articles))

        results = []
        for outcome in outcomes:
            if isinstance(outcome, ArticleAuditFailure):
                failures.append(outcome)
            else:
                results.append(outcome)

        summary = summarize(results, self.config.most_common_issues_limit)
        duration = time.perf_counter() - start_time
        logger.info(
            f"Batch audit complete: articles={summary.total_articles}, "
            f"issues={summary.total_issues}, failures={len(failures)}, "
            f"duration={duration:.2f}s"
        )
        return BatchAuditResult(
            results=results,
            summary=summary,
            failures=failures,
            duration_seconds=duration,
        )
