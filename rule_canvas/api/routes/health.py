import logging

from fastapi import APIRouter

from rule_canvas.core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    """Liveness probe."""
    return {
        "ok": True,
        "service": settings.app_name,
        "rule_store_backend": settings.rule_store_backend.value,
    }
