"""
Report generator for batch audit results.

Generates:
- Markdown reports for editors
- JSON reports for machine processing
- Recommendations based on issue patterns
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..core.models import AuditResult, BatchAuditResult, Category, Issue, Severity

logger = logging.getLogger(__name__)

SEVERITY_EMOJI = {
    "critical": "🔴",
    "high": "🟠",
    "medium": "🟡",
    "low": "🟢",
    "info": "🔵",
}

MAX_ISSUES_PER_SECTION = 10


class ReportGenerator:
    """Генератор отчётов аудита контента."""

    def __init__(self, output_dir: Optional[Union[str, Path]] = None):
        """
        Args:
            output_dir: Директория для сохранения отчётов (по умолчанию audit_reports/)
        """
        self.output_dir = Path(output_dir) if output_dir else Path("audit_reports")
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def generate(self, batch: BatchAuditResult, format: str = "markdown") -> Path:
        """
        Генерация отчёта.

        Args:
            batch: Результаты пакетного аудита
            format: Формат отчёта ("markdown" или "json")

        Returns:
            Путь к сгенерированному файлу
        """
        if format == "json":
            path = self.generate_json_report(batch)
        elif format == "markdown":
            path = self.generate_markdown_report(batch)
        else:
            raise ValueError(f"Unknown report format: {format!r}")

        logger.info(f"Report written to {path}")
        return path

    def _report_path(self, batch: BatchAuditResult, extension: str) -> Path:
        timestamp_str = batch.timestamp.strftime("%Y%m%d_%H%M%S")
        return self.output_dir / f"content_audit_{timestamp_str}.{extension}"

    def render_markdown(self, batch: BatchAuditResult) -> str:
        summary = batch.summary
        lines = []

        # Header
        lines.append("# Content Audit Report")
        lines.append("")
        lines.append(f"**Date:** {batch.timestamp.strftime('%Y-%m-%d %H:%M:%S')}")
        lines.append("")

        # Executive Summary
        lines.append("## Executive Summary")
        lines.append("")
        lines.append(f"- **Articles Audited:** {summary.total_articles}")
        lines.append(f"- **Articles With Issues:** {summary.articles_with_issues}")
        lines.append(f"- **Total Issues:** {summary.total_issues}")
        lines.append(f"- **Average Issues per Article:** {summary.average_issues_per_article:.2f}")
        for severity in Severity:
            count = summary.severity_breakdown.get(severity.value, 0)
            lines.append(f"- {SEVERITY_EMOJI[severity.value]} **{severity.value.capitalize()}:** {count}")
        lines.append("")

        if summary.category_breakdown:
            lines.append("## Issues by Category")
            for category, count in sorted(summary.category_breakdown.items(), key=lambda x: -x[1]):
                lines.append(f"- **{category}:** {count}")
            lines.append("")

        if summary.most_common_issues:
            lines.append("## Most Common Issues")
            for item in summary.most_common_issues:
                lines.append(f"- {item.issue} ({item.count})")
            lines.append("")

        # Articles
        lines.append("## Articles")
        lines.append("")
        for result in sorted(batch.results, key=lambda r: r.content_health_score):
            lines.extend(self._article_section(result))

        if batch.failures:
            lines.append("## ❌ Failed Audits")
            lines.append("")
            for failure in batch.failures:
                lines.append(f"- `{failure.article_id}`: {failure.reason} ({failure.error_type})")
            lines.append("")

        # Recommendations
        recommendations = self.generate_recommendations(batch.results)
        if recommendations:
            lines.append("## Recommendations")
            lines.append("")
            for i, rec in enumerate(recommendations, 1):
                lines.append(f"{i}. **{rec['title']}**")
                lines.append(f"   - {rec['description']}")
                lines.append(f"   - Priority: {rec['priority']}")
                lines.append("")

        # Footer
        lines.append("---")
        lines.append(f"*Audit completed in {batch.duration_seconds:.2f} seconds*")
        return "\n".join(lines)

    def _article_section(self, result: AuditResult) -> List[str]:
        status = "✅ HEALTHY" if result.issues_found == 0 else f"⚠️ {result.issues_found} issues"
        lines = [
            f"### {result.article_title or result.article_id} - {status}",
            f"Health score: {result.content_health_score} | "
            f"Rules: {result.total_rules_executed} | "
            f"Duration: {result.execution_time_ms:.2f}ms",
            "",
        ]

        issues = sorted(result.issues, key=lambda issue: -issue.severity.rank)
        for issue in issues[:MAX_ISSUES_PER_SECTION]:
            lines.append(issue.to_markdown())
        if len(issues) > MAX_ISSUES_PER_SECTION:
            lines.append(f"*... and {len(issues) - MAX_ISSUES_PER_SECTION} more issues*")
            lines.append("")

        for error in result.execution_errors:
            lines.append(f"- ❌ Rule `{error.rule_id}` failed: {error.error_type}: {error.message}")
        if result.execution_errors:
            lines.append("")
        return lines

    def generate_markdown_report(self, batch: BatchAuditResult) -> Path:
        filepath = self._report_path(batch, "md")
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.render_markdown(batch))
        return filepath

    def generate_json_report(self, batch: BatchAuditResult) -> Path:
        filepath = self._report_path(batch, "json")

        report_dict = batch.to_dict()
        report_dict["recommendations"] = self.generate_recommendations(batch.results)

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(report_dict, f, indent=2, ensure_ascii=False)
        return filepath

    def generate_recommendations(self, results: List[AuditResult]) -> List[Dict[str, Any]]:
        """
        Генерация рекомендаций на основе паттернов проблем.

        Args:
            results: Результаты аудита статей

        Returns:
            Список рекомендаций, отсортированный по приоритету
        """
        issues: List[Issue] = [issue for result in results for issue in result.issues]
        by_rule: Dict[str, List[Issue]] = {}
        for issue in issues:
            by_rule.setdefault(issue.rule_id or "", []).append(issue)

        recommendations = []

        # 1. Stale content
        stale = by_rule.get("stale-content", [])
        critical_stale = [i for i in stale if i.severity == Severity.CRITICAL]
        if critical_stale:
            recommendations.append({
                "title": "Review critically outdated articles",
                "description": f"{len(critical_stale)} articles are well past their review window",
                "priority": "critical",
                "affected_issues": len(critical_stale),
                "action": "Schedule a content review and update version references",
            })
        elif stale:
            recommendations.append({
                "title": "Refresh stale content",
                "description": f"{len(stale)} articles show signs of outdated information",
                "priority": "high",
                "affected_issues": len(stale),
                "action": "Update dated references and temporal language",
            })

        # 2. Links
        links = [i for i in issues if i.category == Category.TECHNICAL]
        if links:
            recommendations.append({
                "title": "Fix problematic links",
                "description": f"{len(links)} articles contain broken, insecure or poorly formatted links",
                "priority": "high",
                "affected_issues": len(links),
                "action": "Replace deprecated domains, switch to HTTPS and use descriptive link text",
            })

        # 3. Quality and duplication
        quality = by_rule.get("content-quality", []) + by_rule.get("duplicate-content", [])
        if quality:
            recommendations.append({
                "title": "Improve writing quality",
                "description": f"{len(quality)} articles have readability, structure or repetition issues",
                "priority": "medium",
                "affected_issues": len(quality),
                "action": "Add headings, split long sentences and remove repeated passages",
            })

        # 4. SEO
        seo = [i for i in issues if i.category == Category.SEO]
        if seo:
            priority = "high" if any(i.severity == Severity.HIGH for i in seo) else "low"
            recommendations.append({
                "title": "Optimize articles for search",
                "description": f"{len(seo)} articles have SEO gaps",
                "priority": priority,
                "affected_issues": len(seo),
                "action": "Add meta descriptions, alt text and internal links",
            })

        # 5. Rule failures
        failed = sum(len(result.execution_errors) for result in results)
        if failed:
            recommendations.append({
                "title": "Investigate failing rules",
                "description": f"{failed} rule executions raised errors",
                "priority": "medium",
                "affected_issues": failed,
                "action": "Check the logs for the rule id and article id of each failure",
            })

        priority_order = {"critical": 0, "high": 1, "medium": 2, "low": 3}
        recommendations.sort(key=lambda x: priority_order.get(x["priority"], 99))
        return recommendations
