"""Health reconciliation endpoints: single probe, full cycle, effective status."""

import time

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from toolwatch.api.auth import verify_api_key
from toolwatch.api.dependencies import get_background_tasks, get_database
from toolwatch.api.models import (
    ErrorResponse,
    HealthCycleResponse,
    ProbeResponse,
    StatusResponse,
    ToolRequest,
)
from toolwatch.health.scheduler import check_tool, get_effective_status, run_health_checks
from toolwatch.services.background import BackgroundTaskGroup
from toolwatch.storage.database import Database

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/admin")


@router.post(
    "/health-check",
    response_model=ProbeResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid API key"},
        404: {"model": ErrorResponse, "description": "Tool not found"},
    },
    summary="Probe one tool now",
    description="Probe a single tool and append the outcome to its health history.",
)
async def probe_tool(
    body: ToolRequest,
    api_key: str = Depends(verify_api_key),
    db: Database = Depends(get_database),
) -> ProbeResponse:
    start_time = time.perf_counter()

    result = await check_tool(db, body.tool_id)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tool {body.tool_id} not found",
        )

    latency_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        "Manual health check",
        tool_id=body.tool_id,
        is_online=result.is_online,
        http_status=result.http_status,
    )
    return ProbeResponse(
        tool_id=body.tool_id,
        is_online=result.is_online,
        http_status=result.http_status,
        response_time_ms=result.response_time_ms,
        latency_ms=round(latency_ms, 2),
    )


@router.post(
    "/health-cycle",
    response_model=HealthCycleResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid API key"}},
    summary="Run a health reconciliation cycle",
    description=(
        "Sample approved tools, probe them, record the results and hand "
        "sustained-offline tools to archival. Archival continues after the "
        "response is sent."
    ),
)
async def run_health_cycle(
    api_key: str = Depends(verify_api_key),
    db: Database = Depends(get_database),
    background: BackgroundTaskGroup = Depends(get_background_tasks),
) -> HealthCycleResponse:
    result = await run_health_checks(db, background=background, trigger_source="manual")
    return HealthCycleResponse(
        tools_probed=result.tools_probed,
        online=result.online,
        offline=result.offline,
        records_written=result.records_written,
        archives_triggered=result.archives_triggered,
        records_pruned=result.records_pruned,
        errors=result.errors,
        elapsed_seconds=round(result.elapsed_seconds, 3),
    )


@router.get(
    "/tools/{tool_id}/status",
    response_model=StatusResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid API key"}},
    summary="Effective status of a tool",
    description="Resolve online/unstable/offline from the tool's recent checks.",
)
async def tool_status(
    tool_id: int,
    api_key: str = Depends(verify_api_key),
    db: Database = Depends(get_database),
) -> StatusResponse:
    effective = await get_effective_status(db, tool_id)
    return StatusResponse(tool_id=tool_id, status=effective)
