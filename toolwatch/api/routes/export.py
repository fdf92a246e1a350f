"""Catalog export endpoints: run an export, list the audit log."""

import time

import structlog
from fastapi import APIRouter, Depends, Query

from toolwatch.api.auth import verify_api_key
from toolwatch.api.dependencies import get_database
from toolwatch.api.models import ErrorResponse, ExportAttemptItem, ExportHistoryResponse
from toolwatch.export.schemas import ExportAttempt
from toolwatch.export.service import list_export_history, run_data_export
from toolwatch.storage.database import Database

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/admin")


def _to_item(attempt: ExportAttempt) -> ExportAttemptItem:
    return ExportAttemptItem(
        id=attempt.id,
        exported_at=attempt.exported_at.isoformat(),
        tool_count=attempt.tool_count,
        files_updated=list(attempt.files_updated),
        trigger_source=attempt.trigger_source,
        status=attempt.status,
        error_message=attempt.error_message,
    )


@router.post(
    "/data-export",
    response_model=ExportAttemptItem,
    responses={401: {"model": ErrorResponse, "description": "Invalid API key"}},
    summary="Publish the catalog now",
    description=(
        "Render tools.json and README.md and push whichever changed. "
        "The attempt is recorded and returned, including failures."
    ),
)
async def data_export(
    api_key: str = Depends(verify_api_key),
    db: Database = Depends(get_database),
) -> ExportAttemptItem:
    attempt = await run_data_export(db, trigger_source="manual")
    return _to_item(attempt)


@router.get(
    "/export-history",
    response_model=ExportHistoryResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid API key"}},
    summary="Recent export attempts",
)
async def export_history(
    limit: int = Query(default=20, ge=1, le=500, description="Maximum attempts to return"),
    api_key: str = Depends(verify_api_key),
    db: Database = Depends(get_database),
) -> ExportHistoryResponse:
    start_time = time.perf_counter()
    attempts = await list_export_history(db, limit=limit)
    latency_ms = (time.perf_counter() - start_time) * 1000
    return ExportHistoryResponse(
        exports=[_to_item(a) for a in attempts],
        total=len(attempts),
        latency_ms=round(latency_ms, 2),
    )
