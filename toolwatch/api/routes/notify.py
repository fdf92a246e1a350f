"""Notification issue endpoint."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from toolwatch.api.auth import verify_api_key
from toolwatch.api.dependencies import get_database
from toolwatch.api.models import ErrorResponse, NotificationResponse, NotifyRequest
from toolwatch.github.client import GitHubApiError, IssuesDisabledError
from toolwatch.notifications.service import (
    AlreadyNotifiedError,
    NotificationsNotConfiguredError,
    ToolNotEligibleError,
    ToolNotFoundError,
    notify_tool,
)
from toolwatch.storage.database import Database

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/admin")


@router.post(
    "/github-notify",
    response_model=NotificationResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Tool not eligible"},
        401: {"model": ErrorResponse, "description": "Invalid API key"},
        404: {"model": ErrorResponse, "description": "Tool not found"},
        409: {"description": "Already notified; body carries the existing issue"},
        410: {"model": ErrorResponse, "description": "Issues disabled on the repository"},
        502: {"model": ErrorResponse, "description": "GitHub API error"},
        503: {"model": ErrorResponse, "description": "GitHub token not configured"},
    },
    summary="Open a verification issue on a tool's repository",
)
async def github_notify(
    body: NotifyRequest,
    api_key: str = Depends(verify_api_key),
    db: Database = Depends(get_database),
):
    try:
        record = await notify_tool(db, body.tool_id, force=body.force)
    except AlreadyNotifiedError as e:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "detail": str(e),
                "error_type": "already_notified",
                "issue_url": e.issue_url,
                "issue_number": e.issue_number,
            },
        )
    except NotificationsNotConfiguredError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except ToolNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ToolNotEligibleError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except IssuesDisabledError as e:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail=str(e))
    except GitHubApiError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to create issue: {e}",
        )

    return NotificationResponse(
        tool_id=record.tool_id,
        issue_url=record.issue_url,
        issue_number=record.issue_number,
    )
