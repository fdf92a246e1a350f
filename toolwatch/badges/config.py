"""Configuration for badge display detection."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BadgeConfig(BaseSettings):
    """
    Batching, deadlines and markers for the badge scan.

    All settings can be overridden via environment variables with the
    ``BADGE_`` prefix (e.g. ``BADGE_BATCH_SIZE=10``).
    """

    model_config = SettingsConfigDict(
        env_prefix="BADGE_",
        case_sensitive=False,
        extra="ignore",
    )

    batch_size: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Homepages fetched concurrently within one batch",
    )
    fetch_timeout_seconds: float = Field(
        default=15.0,
        gt=0.0,
        le=120.0,
        description="Deadline for one full homepage fetch",
    )
    meta_marker: str = Field(
        default="nologin-verified",
        description="Meta tag marker that counts as an implicit badge",
    )
    user_agent: str = Field(
        default="toolwatch-BadgeChecker/1.0",
        description="User-Agent sent with homepage fetches",
    )
