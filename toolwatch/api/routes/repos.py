"""Repository metadata endpoints: refresh one tool, run the refresh cycle."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from toolwatch.api.auth import verify_api_key
from toolwatch.api.dependencies import get_database
from toolwatch.api.models import (
    ErrorResponse,
    RepoMetadataResponse,
    RepoRefreshResponse,
    ToolRequest,
)
from toolwatch.github.client import GitHubApiError
from toolwatch.repometa.refresher import InvalidRepoUrlError, refresh_tool, run_repo_refresh
from toolwatch.storage.database import Database

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/admin")


@router.post(
    "/github-fetch",
    response_model=RepoMetadataResponse,
    responses={
        400: {"model": ErrorResponse, "description": "No valid GitHub repository URL"},
        401: {"model": ErrorResponse, "description": "Invalid API key"},
        404: {"model": ErrorResponse, "description": "Tool not found"},
        502: {"model": ErrorResponse, "description": "GitHub API error"},
    },
    summary="Refresh one tool's repository metadata",
)
async def github_fetch(
    body: ToolRequest,
    api_key: str = Depends(verify_api_key),
    db: Database = Depends(get_database),
) -> RepoMetadataResponse:
    try:
        metadata = await refresh_tool(db, body.tool_id)
    except InvalidRepoUrlError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except GitHubApiError as e:
        logger.warning("GitHub fetch failed", tool_id=body.tool_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to fetch GitHub data: {e}",
        )

    if metadata is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tool {body.tool_id} not found",
        )

    return RepoMetadataResponse(
        tool_id=body.tool_id,
        stars=metadata.stars,
        forks=metadata.forks,
        license=metadata.license,
        language=metadata.language,
        updated_at=metadata.updated_at.isoformat() if metadata.updated_at else None,
    )


@router.post(
    "/repo-refresh",
    response_model=RepoRefreshResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid API key"}},
    summary="Run a repository metadata refresh cycle",
)
async def repo_refresh(
    api_key: str = Depends(verify_api_key),
    db: Database = Depends(get_database),
) -> RepoRefreshResponse:
    result = await run_repo_refresh(db, trigger_source="manual")
    return RepoRefreshResponse(
        candidates=result.candidates,
        updated=result.updated,
        skipped_invalid=result.skipped_invalid,
        failed=result.failed,
        elapsed_seconds=round(result.elapsed_seconds, 3),
    )
