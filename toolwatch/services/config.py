"""Configuration for the long-running interval scheduler."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchedulerConfig(BaseSettings):
    """
    Cadence of each reconciliation job.

    All settings can be overridden via environment variables with the
    ``SCHEDULER_`` prefix (e.g. ``SCHEDULER_HEALTH_INTERVAL_HOURS=3``).
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEDULER_",
        case_sensitive=False,
        extra="ignore",
    )

    health_interval_hours: float = Field(default=6.0, gt=0.0)
    badge_interval_hours: float = Field(default=24.0, gt=0.0)
    export_interval_hours: float = Field(default=24.0, gt=0.0)
    repo_refresh_interval_hours: float = Field(default=24.0, gt=0.0)
    drain_timeout_seconds: float = Field(
        default=120.0,
        gt=0.0,
        description="How long shutdown waits for detached background work",
    )
