"""
Health check and status endpoints
"""

from datetime import datetime, timezone
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from booking_voice import __version__
from booking_voice.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request):
    """
    Basic health check endpoint
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": request.app.state.settings.environment,
        "version": __version__
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """
    Readiness check - verifies the database is reachable
    """
    repository = getattr(request.app.state, "repository", None)
    checks = {
        "database": bool(repository is not None and repository.is_connected()),
        "encryption_key": not request.app.state.vault.uses_fallback_key
    }

    ready = checks["database"]
    return JSONResponse(
        status_code=200 if ready else 503,
        content={
            "status": "ready" if ready else "unavailable",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": checks
        }
    )
