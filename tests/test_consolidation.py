"""
Tests for merging rule sub-findings into one Issue.
"""

from content_audit.core.consolidation import consolidate
from content_audit.core.models import Issue, Severity


def make_issue(title, severity, suggestions=(), **metadata):
    return Issue(
        issue=title,
        description=f"{title} description",
        suggestions=list(suggestions),
        metadata={"severity": severity.value, **metadata},
        rule_id="test-rule",
    )


class TestConsolidate:

    def test_no_issues(self):
        assert consolidate([], max_suggestions=5) is None

    def test_highest_severity_becomes_primary(self):
        issues = [
            make_issue("Low one", Severity.LOW, ["a", "b"]),
            make_issue("High one", Severity.HIGH, ["b", "c"]),
            make_issue("Medium one", Severity.MEDIUM, ["d"]),
        ]

        result = consolidate(issues, max_suggestions=3)

        assert result.issue == "High one"
        assert result.severity == Severity.HIGH
        assert result.suggestions == ["b", "c", "d"]
        assert result.metadata["total_issues_found"] == 3
        assert result.metadata["all_issue_types"] == ["High one", "Medium one", "Low one"]

    def test_ties_keep_detection_order(self):
        issues = [
            make_issue("First", Severity.MEDIUM),
            make_issue("Second", Severity.MEDIUM),
        ]
        assert consolidate(issues, max_suggestions=5).issue == "First"

    def test_primary_metadata_wins_on_conflict(self):
        issues = [
            make_issue("Low", Severity.LOW, shared=1, low_only=True),
            make_issue("High", Severity.HIGH, shared=3),
        ]

        metadata = consolidate(issues, max_suggestions=5).metadata

        assert metadata["shared"] == 3
        assert metadata["low_only"] is True
        assert metadata["severity"] == "high"

    def test_extra_metadata_is_added(self):
        result = consolidate(
            [make_issue("Only", Severity.LOW)],
            max_suggestions=5,
            extra_metadata={"age_days": 42},
        )
        assert result.metadata["age_days"] == 42
        assert result.metadata["total_issues_found"] == 1

    def test_inputs_are_not_mutated(self):
        original = make_issue("Only", Severity.LOW, ["a"])
        consolidate([original], max_suggestions=5, extra_metadata={"x": 1})
        assert "x" not in original.metadata
        assert "total_issues_found" not in original.metadata
