"""Configuration for the repository metadata refresher."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RepoRefreshConfig(BaseSettings):
    """
    Selection bounds and staleness for repository metadata refreshes.

    All settings can be overridden via environment variables with the
    ``REPO_REFRESH_`` prefix (e.g. ``REPO_REFRESH_BATCH_LIMIT=25``).
    """

    model_config = SettingsConfigDict(
        env_prefix="REPO_REFRESH_",
        case_sensitive=False,
        extra="ignore",
    )

    batch_limit: int = Field(
        default=10,
        ge=1,
        le=500,
        description="Tools refreshed per cycle",
    )
    staleness_days: int = Field(
        default=7,
        ge=1,
        description="Cached metadata older than this is refreshed",
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        le=120.0,
        description="Deadline for one repository API request",
    )
    user_agent: str = Field(
        default="toolwatch-GitHubFetcher/1.0",
        description="User-Agent sent to the GitHub API",
    )
