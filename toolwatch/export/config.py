"""Configuration for the catalog export to GitHub."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExportConfig(BaseSettings):
    """
    Target repository, artifact names and commit identity.

    All settings can be overridden via environment variables with the
    ``EXPORT_`` prefix (e.g. ``EXPORT_REPO=me/my-list``).
    """

    model_config = SettingsConfigDict(
        env_prefix="EXPORT_",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Target ───────────────────────────────────────────────
    repo: str = Field(
        default="nologin-tools/awesome-nologin-tools",
        description="owner/name of the repository receiving the artifacts",
    )
    data_filename: str = Field(
        default="tools.json",
        description="Path of the structured data artifact",
    )
    readme_filename: str = Field(
        default="README.md",
        description="Path of the rendered listing artifact",
    )

    # ── HTTP ─────────────────────────────────────────────────
    timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=300.0,
        description="Deadline for each contents API request",
    )
    user_agent: str = Field(
        default="toolwatch-Exporter/1.0",
        description="User-Agent sent to the GitHub API",
    )

    # ── Commits ──────────────────────────────────────────────
    committer_name: str = Field(default="nologin-bot")
    committer_email: str = Field(default="bot@nologin.tools")

    # ── Audit ────────────────────────────────────────────────
    error_message_max_length: int = Field(
        default=500,
        ge=50,
        description="Stored error messages are truncated to this length",
    )
    history_limit: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Default number of export attempts listed",
    )
