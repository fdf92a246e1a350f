"""
Request and response models for the operator API.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Response model for errors."""

    detail: str = Field(
        ...,
        description="Error message",
    )
    error_type: str = Field(
        default="error",
        description="Error type",
    )


class ComponentHealth(BaseModel):
    """Health of a single infrastructure component."""

    status: str = Field(..., description="healthy or unhealthy")
    latency_ms: float | None = Field(default=None, description="Check latency")
    details: dict | None = Field(default=None, description="Failure details")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(
        ...,
        description="Overall service status: healthy or unhealthy",
    )
    components: dict[str, ComponentHealth] = Field(default_factory=dict)
    github_configured: bool = Field(default=False)
    archive_configured: bool = Field(default=False)
    background_pending: int = Field(
        default=0,
        description="Detached background tasks still running",
    )
    background_completed: int = Field(default=0)
    background_failed: int = Field(
        default=0,
        description="Detached background tasks that raised",
    )
    version: str = Field(default="0.1.0")


# Requests


class ToolRequest(BaseModel):
    """Request body naming a single tool."""

    tool_id: int = Field(..., ge=1, description="Tool primary key")


class NotifyRequest(ToolRequest):
    """Request body for a notification issue."""

    force: bool = Field(
        default=False,
        description="Create a new issue even if one was already created",
    )


# Health


class ProbeResponse(BaseModel):
    """Outcome of an on-demand probe."""

    tool_id: int
    is_online: bool
    http_status: int | None = None
    response_time_ms: int | None = None
    latency_ms: float = 0.0


class HealthCycleResponse(BaseModel):
    """Summary of a health reconciliation cycle."""

    tools_probed: int
    online: int
    offline: int
    records_written: int
    archives_triggered: list[int] = Field(default_factory=list)
    records_pruned: int
    errors: list[str] = Field(default_factory=list)
    elapsed_seconds: float


class StatusResponse(BaseModel):
    """Effective status of a tool."""

    tool_id: int
    status: str | None = Field(
        default=None,
        description="online, unstable, offline, or null when there is no fresh data",
    )


# Badges


class BadgeCycleResponse(BaseModel):
    """Summary of a badge detection cycle."""

    tools_scanned: int
    explicit: int
    implicit: int
    none: int
    records_written: int
    errors: list[str] = Field(default_factory=list)
    elapsed_seconds: float


class BadgeStatusResponse(BaseModel):
    """Last recorded badge classification of a tool."""

    tool_id: int
    display_type: str
    last_checked_at: str


# Export


class ExportAttemptItem(BaseModel):
    """One export audit row."""

    id: int | None = None
    exported_at: str
    tool_count: int
    files_updated: list[str] = Field(default_factory=list)
    trigger_source: str
    status: str
    error_message: str | None = None


class ExportHistoryResponse(BaseModel):
    """Recent export attempts, newest first."""

    exports: list[ExportAttemptItem] = Field(default_factory=list)
    total: int
    latency_ms: float = 0.0


# Repository metadata


class RepoMetadataResponse(BaseModel):
    """Freshly fetched repository metadata."""

    tool_id: int
    stars: int
    forks: int
    license: str | None = None
    language: str | None = None
    updated_at: str | None = None


class RepoRefreshResponse(BaseModel):
    """Summary of a repository metadata refresh cycle."""

    candidates: int
    updated: list[int] = Field(default_factory=list)
    skipped_invalid: list[int] = Field(default_factory=list)
    failed: list[int] = Field(default_factory=list)
    elapsed_seconds: float


# Notifications


class NotificationResponse(BaseModel):
    """A created notification issue."""

    tool_id: int
    issue_url: str | None = None
    issue_number: int | None = None
