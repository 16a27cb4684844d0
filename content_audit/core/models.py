"""
Core data models for the content audit engine.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import InvalidArticleError


class Severity(Enum):
    """Уровень серьёзности проблемы."""
    CRITICAL = "critical"  # Статья вводит в заблуждение или устарела
    HIGH = "high"          # Серьёзная проблема, требует исправления
    MEDIUM = "medium"      # Проблема средней важности
    LOW = "low"            # Незначительная проблема или улучшение
    INFO = "info"          # Только к сведению

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        """Accept a Severity or its (case-insensitive) string value."""
        if isinstance(value, Severity):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown severity: {value!r}") from None


_SEVERITY_RANK = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
    Severity.INFO: 0,
}


class Category(Enum):
    """Категория правила."""
    CONTENT_QUALITY = "content-quality"
    TECHNICAL = "technical"
    SEO = "seo"


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidArticleError(f"Invalid lastModified value: {value!r}") from None
    else:
        raise InvalidArticleError(f"Invalid lastModified value: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Article:
    """Статья базы знаний (неизменяемый вход для правил)."""

    id: str
    title: str
    content: str
    last_modified: datetime
    tags: Tuple[str, ...] = ()
    category: Optional[str] = None
    description: Optional[str] = None
    excerpt: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Article":
        """Build an article from a store payload (camelCase or snake_case keys)."""
        if "id" not in data:
            raise InvalidArticleError("Article payload has no 'id'")

        last_modified = data.get("last_modified", data.get("lastModified"))
        tags = data.get("tags") or ()
        if isinstance(tags, str):
            tags = (tags,)

        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            content=data.get("content") or "",
            last_modified=_parse_datetime(last_modified),
            tags=tuple(str(tag) for tag in tags),
            category=data.get("category"),
            description=data.get("description"),
            excerpt=data.get("excerpt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "last_modified": self.last_modified.isoformat(),
            "tags": list(self.tags),
            "category": self.category,
            "description": self.description,
            "excerpt": self.excerpt,
        }


@dataclass
class RuleMetadata:
    """Описание зарегистрированного правила."""

    id: str
    name: str
    description: str
    category: Category
    severity: Severity
    enabled: bool
    configurable: bool
    version: str
    author: str = "System"
    tags: List[str] = field(default_factory=list)
    config: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "severity": self.severity.value,
            "enabled": self.enabled,
            "configurable": self.configurable,
            "version": self.version,
            "author": self.author,
            "tags": list(self.tags),
            "config": dict(self.config),
        }


@dataclass
class Issue:
    """Проблема, найденная правилом в одной статье."""

    issue: str
    description: str
    suggestions: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    rule_id: Optional[str] = None
    rule_name: Optional[str] = None
    category: Optional[Category] = None
    detected_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
        compare=False,
    )

    @property
    def severity(self) -> Severity:
        return Severity.parse(self.metadata.get("severity", Severity.MEDIUM.value))

    def to_dict(self) -> Dict[str, Any]:
        """Преобразовать в словарь для JSON."""
        return {
            "issue": self.issue,
            "description": self.description,
            "suggestions": list(self.suggestions),
            "metadata": dict(self.metadata),
            "severity": self.severity.value,
            "rule_id": self.rule_id,
            "rule_name": self.rule_name,
            "category": self.category.value if self.category else None,
            "detected_at": self.detected_at.isoformat(),
        }

    def to_markdown(self) -> str:
        """Преобразовать в markdown для отчёта."""
        severity_emoji = {
            Severity.CRITICAL: "🔴",
            Severity.HIGH: "🟠",
            Severity.MEDIUM: "🟡",
            Severity.LOW: "🟢",
            Severity.INFO: "🔵",
        }

        md = f"### {severity_emoji[self.severity]} [{self.severity.value.upper()}] {self.issue}\n\n"
        if self.rule_name:
            md += f"**Rule:** {self.rule_name} (`{self.rule_id}`)\n\n"
        md += f"**Description:** {self.description}\n\n"

        if self.suggestions:
            md += "**Suggestions:**\n"
            for suggestion in self.suggestions:
                md += f"- {suggestion}\n"
            md += "\n"

        return md


@dataclass
class RuleResult:
    """Результат выполнения одного правила для одной статьи."""

    rule_id: str
    rule_name: str
    passed: bool
    issues_count: int
    execution_time_ms: float
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "rule_name": self.rule_name,
            "passed": self.passed,
            "issues_count": self.issues_count,
            "execution_time_ms": self.execution_time_ms,
            "error": self.error,
        }


@dataclass
class RuleExecutionError:
    """Сбой правила во время выполнения (не считается проблемой статьи)."""

    rule_id: str
    rule_name: str
    error_type: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "rule_name": self.rule_name,
            "error_type": self.error_type,
            "message": self.message,
        }


@dataclass
class AuditResult:
    """Итог аудита одной статьи."""

    article_id: str
    article_title: str
    total_rules_executed: int
    issues_found: int
    issues: List[Issue]
    rule_results: List[RuleResult]
    execution_time_ms: float
    content_health_score: int
    execution_errors: List[RuleExecutionError] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "article_id": self.article_id,
            "article_title": self.article_title,
            "total_rules_executed": self.total_rules_executed,
            "issues_found": self.issues_found,
            "issues": [issue.to_dict() for issue in self.issues],
            "rule_results": [result.to_dict() for result in self.rule_results],
            "execution_time_ms": self.execution_time_ms,
            "content_health_score": self.content_health_score,
            "execution_errors": [error.to_dict() for error in self.execution_errors],
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class MostCommonIssue:
    issue: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"issue": self.issue, "count": self.count}


@dataclass
class BatchAuditSummary:
    """Сводка по набору аудитов."""

    total_articles: int
    total_issues: int
    articles_with_issues: int
    average_issues_per_article: float
    severity_breakdown: Dict[str, int]
    category_breakdown: Dict[str, int]
    most_common_issues: List[MostCommonIssue]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_articles": self.total_articles,
            "total_issues": self.total_issues,
            "articles_with_issues": self.articles_with_issues,
            "average_issues_per_article": self.average_issues_per_article,
            "severity_breakdown": dict(self.severity_breakdown),
            "category_breakdown": dict(self.category_breakdown),
            "most_common_issues": [item.to_dict() for item in self.most_common_issues],
        }


@dataclass
class ArticleAuditFailure:
    """Статья, для которой аудит не удалось выполнить."""

    article_id: str
    reason: str
    error_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "article_id": self.article_id,
            "reason": self.reason,
            "error_type": self.error_type,
        }


@dataclass
class BatchAuditResult:
    """Результаты пакетного аудита и сводка."""

    results: List[AuditResult]
    summary: BatchAuditSummary
    failures: List[ArticleAuditFailure] = field(default_factory=list)
    duration_seconds: float = 0.0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [result.to_dict() for result in self.results],
            "summary": self.summary.to_dict(),
            "failures": [failure.to_dict() for failure in self.failures],
            "duration_seconds": self.duration_seconds,
            "timestamp": self.timestamp.isoformat(),
        }
