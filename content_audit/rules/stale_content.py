"""
Stale content rule.

Checks:
- Content age (months since last modification)
- Version references ("version 2.3", "v1.0", "2.1 update")
- Time-sensitive language ("currently", "coming soon", ...)
- References to outdated technology
"""

import re
from typing import Any, List, Mapping, Optional

from ..core.base_rule import BaseRule, is_number, is_string_list
from ..core.consolidation import consolidate
from ..core.context import ExecutionContext
from ..core.models import Category, Issue, Severity
from ..core.text import round_half_up

VERSION_PATTERNS = [
    re.compile(r"version\s+(\d+\.?\d*\.?\d*)", re.IGNORECASE),
    re.compile(r"v(\d+\.?\d*\.?\d*)", re.IGNORECASE),
    re.compile(r"(\d+\.?\d*\.?\d*)\s+(update|release)", re.IGNORECASE),
]

OUTDATED_TECHNOLOGY = [
    "internet explorer", "ie6", "ie7", "ie8", "ie9",
    "flash player", "adobe flash", "silverlight",
    "windows xp", "windows vista", "windows 7",
    "jquery 1.", "angular 1.", "angularjs",
    "php 5.", "python 2.", "node 0.", "node 6.",
    "http://",  # insecure protocol references
]

DEFAULT_TEMPORAL_KEYWORDS = [
    "last year", "this year", "currently", "at the moment",
    "recently", "soon", "upcoming", "latest version",
    "new feature", "beta", "coming soon",
]


class StaleContentRule(BaseRule):
    """Поиск устаревшего контента."""

    def __init__(self):
        super().__init__(
            rule_id="stale-content",
            name="Stale Content Detection",
            description=(
                "Identifies articles that may contain outdated information based on age, "
                "version references, and temporal language"
            ),
            category=Category.CONTENT_QUALITY,
            severity=Severity.HIGH,
            version="1.2.0",
            tags=["outdated", "maintenance", "freshness"],
            configurable=True,
            default_config={
                "max_age_months": 12,
                "critical_age_months": 18,
                "check_version_references": True,
                "check_temporal_language": True,
                "temporal_keywords": list(DEFAULT_TEMPORAL_KEYWORDS),
            },
        )

    def execute(self, context: ExecutionContext) -> Optional[Issue]:
        config = self.config
        content = context.content
        issues: List[Issue] = []

        age_issue = self.check_content_age(context.metadata.age_days, config)
        if age_issue:
            issues.append(age_issue)

        if config["check_version_references"]:
            issues.extend(self.check_version_references(content))

        if config["check_temporal_language"]:
            issues.extend(self.check_temporal_language(content, config["temporal_keywords"]))

        issues.extend(self.check_outdated_technology(content))

        return consolidate(
            issues,
            max_suggestions=6,
            extra_metadata={"age_days": context.metadata.age_days},
        )

    def check_content_age(self, age_days: int, config: Mapping[str, Any]) -> Optional[Issue]:
        age_months = age_days / 30
        rounded = round_half_up(age_months)

        if age_months > config["critical_age_months"]:
            return self.create_issue(
                "Critically outdated content",
                f"This article hasn't been updated in {rounded} months and may contain "
                "significantly outdated information.",
                [
                    "Review and update the content immediately",
                    "Verify all information is still accurate",
                    "Update any changed procedures or features",
                    "Consider archiving if no longer relevant",
                ],
                Severity.CRITICAL,
                age_months=rounded,
            )
        if age_months > config["max_age_months"]:
            return self.create_issue(
                "Potentially outdated content",
                f"This article is {rounded} months old and should be reviewed for accuracy.",
                [
                    "Review content for accuracy",
                    "Update any changed information",
                    "Refresh examples and screenshots",
                    'Update the "last reviewed" date',
                ],
                Severity.HIGH,
                age_months=rounded,
            )
        return None

    def check_version_references(self, content: str) -> List[Issue]:
        if not content:
            return []

        for pattern in VERSION_PATTERNS:
            matches = [match.group(0) for match in pattern.finditer(content)]
            if matches:
                # one finding per article, from the first pattern that hits
                return [self.create_issue(
                    "Version references detected",
                    "Content contains specific version numbers that may become outdated.",
                    [
                        "Review version references for accuracy",
                        'Consider using "latest version" instead of specific numbers',
                        "Update version numbers if they're outdated",
                        "Add a note about when version info was last checked",
                    ],
                    Severity.MEDIUM,
                    versions=matches[:3],
                )]
        return []

    def check_temporal_language(self, content: str, keywords: List[str]) -> List[Issue]:
        if not content:
            return []

        content_lower = content.lower()
        found = [keyword for keyword in keywords if keyword.lower() in content_lower]
        if not found:
            return []

        return [self.create_issue(
            "Temporal language detected",
            "Content uses time-sensitive language that may become inaccurate.",
            [
                "Replace temporal language with specific dates",
                "Use evergreen language where possible",
                "Add specific update dates for time-sensitive information",
                "Review and update temporal references regularly",
            ],
            Severity.MEDIUM,
            keywords=found[:5],
        )]

    def check_outdated_technology(self, content: str) -> List[Issue]:
        if not content:
            return []

        content_lower = content.lower()
        found = [tech for tech in OUTDATED_TECHNOLOGY if tech in content_lower]
        if not found:
            return []

        return [self.create_issue(
            "Outdated technology references",
            "Content references potentially outdated technologies or versions.",
            [
                "Update technology references to current versions",
                "Remove references to deprecated technologies",
                "Verify all technical information is current",
                "Consider adding browser/system requirements",
            ],
            Severity.HIGH,
            technologies=found[:3],
        )]

    def validate_config(self, config: Mapping[str, Any]) -> bool:
        max_age = config.get("max_age_months")
        critical_age = config.get("critical_age_months")
        return (
            is_number(max_age)
            and is_number(critical_age)
            and max_age > 0
            and critical_age > max_age
            and is_string_list(config.get("temporal_keywords"))
        )
