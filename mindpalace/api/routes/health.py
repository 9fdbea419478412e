"""Health & Readiness Probes - liveness and readiness endpoints.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 while loading or if the durable store is unreachable
"""

import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from mindpalace import __version__
from mindpalace.api.dependencies import get_palace
from mindpalace.services.palace import MindPalace

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "mind-palace-api",
        "version": __version__,
    }


@router.get("/ready")
async def readiness_check(palace: MindPalace = Depends(get_palace)):
    """Readiness probe - loading flag, durable connectivity and writer counters."""
    if palace.is_loading:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "loading"},
        )
    if not await palace.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {
        "status": "ready",
        "checks": {"database": "healthy"},
        "writes": palace.sync.stats(),
    }
