"""Audit router."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from backend.models import (
    AuditOptions,
    AuditResultModel,
    BatchAuditRequest,
    BatchAuditResponse,
    RuleConfigResponse,
    RuleConfigUpdate,
    RuleInfo,
    RulesResponse,
    StatsResponse,
)
from content_audit.core.errors import ArticleNotFoundError, RuleNotFoundError
from content_audit.core.models import Category, Severity
from content_audit.service import AuditService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/audit", tags=["audit"])


def get_service_from_main() -> AuditService:
    """Получить сервис аудита из main модуля."""
    from backend.main import service
    if service is None:
        raise HTTPException(503, "Audit service not initialized")
    return service


def _check_severity(value: Optional[str]) -> None:
    if value is None:
        return
    try:
        Severity.parse(value)
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.get("/rules", response_model=RulesResponse)
async def list_rules(
    category: Optional[str] = None,
    enabled: Optional[bool] = None,
    tag: Optional[str] = None,
    service: AuditService = Depends(get_service_from_main),
):
    """Список правил (в порядке регистрации) и их группировка по категориям."""
    if category is not None and category not in {c.value for c in Category}:
        raise HTTPException(400, f"Unknown category: {category}")

    rules = await service.list_rules(category=category, enabled=enabled, tag=tag)
    groups = await service.rules_by_category()
    return {
        "rules": [rule.to_dict() for rule in rules],
        "total": len(rules),
        "categories": {
            name: [rule.to_dict() for rule in members] for name, members in groups.items()
        },
    }


@router.get("/rules/{rule_id}", response_model=RuleInfo)
async def get_rule(rule_id: str, service: AuditService = Depends(get_service_from_main)):
    """Описание одного правила."""
    try:
        rule = await service.get_rule(rule_id)
    except RuleNotFoundError as e:
        raise HTTPException(404, str(e))
    return rule.to_dict()


@router.post("/rules/{rule_id}/config", response_model=RuleConfigResponse)
async def update_rule_config(
    rule_id: str,
    request: RuleConfigUpdate,
    service: AuditService = Depends(get_service_from_main),
):
    """
    Обновить конфигурацию правила.

    400 если правило не настраиваемое или конфигурация невалидна.
    """
    try:
        outcome = await service.update_rule_config(rule_id, request.config)
    except RuleNotFoundError as e:
        raise HTTPException(404, str(e))

    if not outcome["success"]:
        raise HTTPException(400, f"Configuration rejected for rule '{rule_id}'")
    return outcome


@router.post("/article/{article_id}", response_model=AuditResultModel)
async def audit_article(
    article_id: str,
    options: Optional[AuditOptions] = None,
    service: AuditService = Depends(get_service_from_main),
):
    """Аудит одной статьи."""
    options = options or AuditOptions()
    _check_severity(options.min_severity)

    try:
        result = await service.audit_article(
            article_id,
            rules=options.rules,
            min_severity=options.min_severity,
        )
    except ArticleNotFoundError as e:
        raise HTTPException(404, str(e))
    return result.to_dict()


@router.post("/articles", response_model=BatchAuditResponse)
async def audit_articles(
    request: BatchAuditRequest,
    service: AuditService = Depends(get_service_from_main),
):
    """
    Пакетный аудит; ненайденные статьи попадают в failures.

    Without ``article_ids`` the batch comes from the store, by ``category``
    or the first ``limit`` articles.
    """
    _check_severity(request.min_severity)

    batch = await service.audit_articles(
        request.article_ids,
        rules=request.rules,
        min_severity=request.min_severity,
        category=request.category,
        limit=request.limit,
    )
    return batch.to_dict()


@router.get("/stats", response_model=StatsResponse)
async def get_stats(service: AuditService = Depends(get_service_from_main)):
    """Статистика правил и пробный аудит."""
    return await service.get_stats()
