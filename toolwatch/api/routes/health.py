"""
Health check endpoint for the operator API.
"""

import time

import structlog
from fastapi import APIRouter, Depends

from toolwatch.api.dependencies import get_background_tasks, get_database
from toolwatch.api.models import ComponentHealth, HealthResponse
from toolwatch.config.settings import get_settings
from toolwatch.services.background import BackgroundTaskGroup
from toolwatch.storage.database import Database

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _check_database(db: Database) -> ComponentHealth:
    """Check database connectivity and measure latency."""
    start = time.perf_counter()
    try:
        healthy = await db.health_check()
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="healthy" if healthy else "unhealthy",
            latency_ms=round(latency_ms, 2),
        )
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="unhealthy",
            latency_ms=round(latency_ms, 2),
            details={"error": str(e)},
        )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Check the health of the service and its database.",
)
async def health_check(
    db: Database = Depends(get_database),
    background: BackgroundTaskGroup = Depends(get_background_tasks),
) -> HealthResponse:
    settings = get_settings()
    db_health = await _check_database(db)

    return HealthResponse(
        status=db_health.status,
        components={"database": db_health},
        github_configured=settings.github_configured,
        archive_configured=settings.archive_configured,
        background_pending=background.pending,
        background_completed=background.completed,
        background_failed=background.failed,
    )
