"""Configuration for liveness probing and health reconciliation."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class HealthConfig(BaseSettings):
    """Probe deadlines, sampling bounds and resolution window.

    All settings can be overridden via environment variables with the
    ``HEALTH_`` prefix (e.g. ``HEALTH_SAMPLE_SIZE=20``).
    """

    model_config = SettingsConfigDict(
        env_prefix="HEALTH_",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Scheduling ───────────────────────────────────────────
    sample_size: int = Field(
        default=15,
        ge=1,
        le=500,
        description="Approved tools randomly sampled per cycle",
    )
    batch_size: int = Field(
        default=3,
        ge=1,
        le=50,
        description="Probes run concurrently within one batch",
    )

    # ── Probing ──────────────────────────────────────────────
    probe_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        le=120.0,
        description="Deadline for each individual probe attempt",
    )
    user_agent: str = Field(
        default="toolwatch-HealthChecker/1.0",
        description="User-Agent sent with probes",
    )

    # ── Resolution ───────────────────────────────────────────
    window_hours: int = Field(
        default=48,
        ge=1,
        description="Checks older than this are not considered live data",
    )
    tolerance: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Most recent checks inspected for offline/unstable",
    )

    # ── Retention ────────────────────────────────────────────
    retention_days: int = Field(
        default=30,
        ge=1,
        description="Health check rows older than this are deleted",
    )
