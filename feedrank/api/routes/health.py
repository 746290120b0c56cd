"""Health Checks — process liveness and content-store readiness.

Invariants:
    - GET /health/ answers 200 without touching the database
    - GET /health/ready answers 503 while the content store database is unreachable
    - Readiness also reports how many trending rankings are currently cached
"""

import logging
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from feedrank.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "feedrank-api"
SERVICE_VERSION = "1.0.0"


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness():
    return {"status": "healthy", "service": SERVICE_NAME, "version": SERVICE_VERSION}


@router.get("/ready")
async def readiness(request: Request):
    """Ready when SELECT 1 succeeds on the lifespan-created session manager."""
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        logger.warning("Content store not ready", extra={"operation": "health_check"})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {
        "status": "ready",
        "checks": {"database": "healthy"},
        "trending_cache_entries": len(request.app.state.trending_cache),
    }
