"""Pydantic models for API requests and responses."""

from typing import List, Dict, Any, Optional
from pydantic import BaseModel, Field


# ═══════════════════════════════════════════════════════
# Rule Models
# ═══════════════════════════════════════════════════════

class RuleInfo(BaseModel):
    """Registered rule description."""
    id: str = Field(..., description="Rule id")
    name: str = Field(..., description="Human-readable rule name")
    description: str = Field(..., description="What the rule checks")
    category: str = Field(..., description="Rule category (content-quality/technical/seo)")
    severity: str = Field(..., description="Default severity of the rule")
    enabled: bool = Field(..., description="Whether the rule runs in audits")
    configurable: bool = Field(..., description="Whether the config can be updated")
    version: str = Field(..., description="Rule version")
    author: str = Field("System", description="Rule author")
    tags: List[str] = Field(default_factory=list, description="Rule tags")
    config: Dict[str, Any] = Field(default_factory=dict, description="Current rule config")


class RulesResponse(BaseModel):
    """Rule listing response."""
    rules: List[RuleInfo] = Field(..., description="Registered rules in registration order")
    total: int = Field(..., description="Number of rules returned")
    categories: Dict[str, List[RuleInfo]] = Field(
        default_factory=dict, description="All registered rules grouped by category"
    )


class RuleConfigUpdate(BaseModel):
    """Partial rule config update."""
    config: Dict[str, Any] = Field(..., description="Config keys to merge into the current config")


class RuleConfigResponse(BaseModel):
    """Rule config update outcome."""
    success: bool = Field(..., description="Whether the update was applied")
    rule_id: str = Field(..., description="Rule id")
    config: Dict[str, Any] = Field(..., description="Rule config after the update")


# ═══════════════════════════════════════════════════════
# Audit Models
# ═══════════════════════════════════════════════════════

class AuditOptions(BaseModel):
    """Options shared by single and batch audits."""
    rules: Optional[List[str]] = Field(None, description="Rule id allowlist (None = all enabled rules)")
    min_severity: Optional[str] = Field(None, description="Drop issues whose severity ranks below this")


class BatchAuditRequest(AuditOptions):
    """Batch audit request."""
    article_ids: Optional[List[str]] = Field(None, description="Ids of stored articles to audit")
    category: Optional[str] = Field(None, description="Audit every stored article in this category (without ids)")
    limit: int = Field(10, ge=1, le=50, description="Number of stored articles to audit without ids or category")


class IssueModel(BaseModel):
    """Single consolidated issue reported by a rule."""
    issue: str
    description: str
    suggestions: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    severity: str
    rule_id: Optional[str] = None
    rule_name: Optional[str] = None
    category: Optional[str] = None
    detected_at: str


class RuleResultModel(BaseModel):
    rule_id: str
    rule_name: str
    passed: bool
    issues_count: int
    execution_time_ms: float
    error: Optional[str] = None


class RuleExecutionErrorModel(BaseModel):
    rule_id: str
    rule_name: str
    error_type: str
    message: str


class AuditResultModel(BaseModel):
    """Audit result for one article."""
    article_id: str
    article_title: str
    total_rules_executed: int
    issues_found: int
    issues: List[IssueModel]
    rule_results: List[RuleResultModel]
    execution_time_ms: float
    content_health_score: int = Field(..., description="40-100, 75 when no rule ran")
    execution_errors: List[RuleExecutionErrorModel] = Field(default_factory=list)
    timestamp: str


class MostCommonIssueModel(BaseModel):
    issue: str
    count: int


class BatchSummaryModel(BaseModel):
    """Batch summary statistics."""
    total_articles: int
    total_issues: int
    articles_with_issues: int
    average_issues_per_article: float
    severity_breakdown: Dict[str, int]
    category_breakdown: Dict[str, int]
    most_common_issues: List[MostCommonIssueModel]


class AuditFailureModel(BaseModel):
    article_id: str
    reason: str
    error_type: str


class BatchAuditResponse(BaseModel):
    """Batch audit response."""
    results: List[AuditResultModel]
    summary: BatchSummaryModel
    failures: List[AuditFailureModel] = Field(default_factory=list)
    duration_seconds: float
    timestamp: str


class StatsResponse(BaseModel):
    """Rule statistics with a sample audit."""
    total_rules: int
    enabled_rules: int
    configurable_rules: int
    rule_categories: Dict[str, int]
    sample_audit: Dict[str, Any]


# ═══════════════════════════════════════════════════════
# Health Models
# ═══════════════════════════════════════════════════════

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status")
    version: Optional[str] = Field(None, description="Engine version")
    rules: Optional[int] = Field(None, description="Number of registered rules")
    articles: Optional[int] = Field(None, description="Number of stored articles, if known")
