"""Configuration for verification notification issues."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class NotificationConfig(BaseSettings):
    """
    Settings for issues opened on verified tools' repositories.

    All settings can be overridden via environment variables with the
    ``NOTIFY_`` prefix (e.g. ``NOTIFY_LABEL=verified``).
    """

    model_config = SettingsConfigDict(
        env_prefix="NOTIFY_",
        case_sensitive=False,
        extra="ignore",
    )

    label: str = Field(
        default="nologin-verified",
        description="Label applied to the issue when the repository has it",
    )
    timeout_seconds: float = Field(
        default=15.0,
        gt=0.0,
        le=120.0,
        description="Deadline for the issue creation request",
    )
    user_agent: str = Field(
        default="toolwatch-Notifier/1.0",
        description="User-Agent sent to the GitHub API",
    )
    error_message_max_length: int = Field(
        default=500,
        ge=50,
        description="Stored error messages are truncated to this length",
    )
