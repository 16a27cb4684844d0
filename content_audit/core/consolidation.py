"""
Consolidation of several sub-findings of one rule into a single Issue.
"""

import dataclasses
from typing import Any, Dict, Optional, Sequence

from .models import Issue, Severity


def _rank(issue: Issue, default: Severity) -> int:
    severity = issue.metadata.get("severity")
    if severity is None:
        return default.rank
    return Severity.parse(severity).rank


def consolidate(
    issues: Sequence[Issue],
    max_suggestions: int,
    default_severity: Severity = Severity.MEDIUM,
    extra_metadata: Optional[Dict[str, Any]] = None,
) -> Optional[Issue]:
    """
    Merge sub-findings into one Issue.

    The highest-severity sub-finding becomes the reported issue (ties keep
    detection order). Suggestions of all sub-findings are merged in that
    order, deduplicated and capped at ``max_suggestions``. Metadata of the
    lower-ranked sub-findings is folded in underneath the primary's, and the
    result records ``total_issues_found`` and ``all_issue_types``.
    """
    if not issues:
        return None

    ranked = sorted(issues, key=lambda issue: -_rank(issue, default_severity))
    primary = ranked[0]

    suggestions = []
    for issue in ranked:
        for suggestion in issue.suggestions:
            if suggestion not in suggestions:
                suggestions.append(suggestion)

    metadata: Dict[str, Any] = {}
    for issue in reversed(ranked):
        metadata.update(issue.metadata)
    metadata["severity"] = primary.metadata.get("severity", default_severity.value)
    metadata.update(extra_metadata or {})
    metadata["total_issues_found"] = len(ranked)
    metadata["all_issue_types"] = [issue.issue for issue in ranked]

    return dataclasses.replace(
        primary,
        suggestions=suggestions[:max_suggestions],
        metadata=metadata,
    )
