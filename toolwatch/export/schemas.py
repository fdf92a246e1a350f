"""Schema definitions for the exported catalog and its audit log."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

VALID_TRIGGER_SOURCES: frozenset[str] = frozenset({"manual", "cron"})
VALID_EXPORT_STATUSES: frozenset[str] = frozenset({"success", "error"})


@dataclass
class CatalogEntry:
    """One approved tool as it appears in the published artifacts."""

    slug: str
    name: str
    url: str
    description: str | None
    core_task: str
    category: str | None
    featured: bool
    repo_url: str | None
    github_stars: int | None

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the published (camelCase) field names, in order."""
        return {
            "slug": self.slug,
            "name": self.name,
            "url": self.url,
            "description": self.description,
            "coreTask": self.core_task,
            "category": self.category,
            "featured": self.featured,
            "repoUrl": self.repo_url,
            "githubStars": self.github_stars,
        }


@dataclass
class ExportAttempt:
    """
    One row of the ``data_exports`` audit log.

    Attributes:
        trigger_source: manual or cron.
        status: success or error.
        tool_count: Approved tools rendered (0 if the run failed early).
        files_updated: Artifacts actually written this attempt.
        error_message: Truncated failure reason, when status is error.
        exported_at: When the attempt started.
        id: Database id, once stored.
    """

    trigger_source: str
    status: str = "success"
    tool_count: int = 0
    files_updated: list[str] = field(default_factory=list)
    error_message: str | None = None
    exported_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    id: int | None = None

    def __post_init__(self) -> None:
        if self.trigger_source not in VALID_TRIGGER_SOURCES:
            raise ValueError(
                f"Invalid trigger_source {self.trigger_source!r}. "
                f"Must be one of: {sorted(VALID_TRIGGER_SOURCES)}"
            )
        if self.status not in VALID_EXPORT_STATUSES:
            raise ValueError(
                f"Invalid status {self.status!r}. "
                f"Must be one of: {sorted(VALID_EXPORT_STATUSES)}"
            )
