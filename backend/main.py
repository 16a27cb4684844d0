"""
FastAPI backend для Content Audit.

Сервис аудита создаётся один раз при старте и живёт в модуле.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.config import get_settings
from backend.routers import audit, health
from content_audit import __version__
from content_audit.config import load_rule_overrides
from content_audit.registry import create_default_registry
from content_audit.service import AuditService
from content_audit.store import InMemoryArticleStore, load_articles

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Глобальный сервис (singleton)
service: Optional[AuditService] = None


def build_service() -> AuditService:
    """Собрать сервис из настроек."""
    settings = get_settings()

    store = InMemoryArticleStore()
    if settings.articles_path:
        for article in load_articles(settings.articles_path):
            store.add(article)
    else:
        logger.warning("CONTENT_AUDIT_ARTICLES_PATH is not set, starting with an empty article store")

    registry = create_default_registry()
    if settings.rule_overrides_path:
        registry.apply_overrides(load_rule_overrides(settings.rule_overrides_path))

    return AuditService(store, registry=registry, config=settings.engine_config())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle: startup и shutdown."""
    global service

    # === STARTUP ===
    service = build_service()
    logger.info(
        f"🚀 Content audit started: {len(service.registry)} rules, "
        f"{len(service.store)} articles"
    )

    yield

    # === SHUTDOWN ===
    service = None
    logger.info("Content audit stopped")


app = FastAPI(
    title="Content Audit API",
    version=__version__,
    description="Rule-based quality audit for knowledge base articles",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in get_settings().cors_origins.split(",")],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== Подключение роутеров ====================

app.include_router(health.router)
app.include_router(audit.router)


# ==================== Run ====================

if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
