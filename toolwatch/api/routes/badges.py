"""Badge detection endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from toolwatch.api.auth import verify_api_key
from toolwatch.api.dependencies import get_database
from toolwatch.api.models import BadgeCycleResponse, BadgeStatusResponse, ErrorResponse
from toolwatch.badges.detector import run_badge_detection
from toolwatch.badges.repository import BadgeDisplayRepository
from toolwatch.storage.database import Database

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/admin")


@router.post(
    "/badge-scan",
    response_model=BadgeCycleResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid API key"}},
    summary="Run a badge detection cycle",
)
async def badge_scan(
    api_key: str = Depends(verify_api_key),
    db: Database = Depends(get_database),
) -> BadgeCycleResponse:
    result = await run_badge_detection(db, trigger_source="manual")
    return BadgeCycleResponse(
        tools_scanned=result.tools_scanned,
        explicit=result.explicit,
        implicit=result.implicit,
        none=result.none,
        records_written=result.records_written,
        errors=result.errors,
        elapsed_seconds=round(result.elapsed_seconds, 3),
    )


@router.get(
    "/tools/{tool_id}/badge",
    response_model=BadgeStatusResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid API key"},
        404: {"model": ErrorResponse, "description": "Tool never scanned"},
    },
    summary="Badge classification of a tool",
)
async def tool_badge(
    tool_id: int,
    api_key: str = Depends(verify_api_key),
    db: Database = Depends(get_database),
) -> BadgeStatusResponse:
    record = await BadgeDisplayRepository(db).get(tool_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No badge scan recorded for tool {tool_id}",
        )

    return BadgeStatusResponse(
        tool_id=record.tool_id,
        display_type=record.display_type,
        last_checked_at=record.last_checked_at.isoformat(),
    )
