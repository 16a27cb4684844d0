"""Health router."""

from fastapi import APIRouter
from backend.models import HealthResponse
from content_audit import __version__

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health():
    """Health check."""
    from backend.main import service
    return {
        "status": "ok" if service else "starting",
        "version": __version__,
        "rules": len(service.registry) if service else None,
        "articles": len(service.store) if service and hasattr(service.store, "__len__") else None,
    }
