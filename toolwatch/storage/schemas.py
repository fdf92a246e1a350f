"""Schema definitions for directory tool rows.

The tool record is owned by the directory's CRUD layer. The reconciliation
jobs only read identity, URL and status, and write the archive URL and the
cached repository metadata.
"""

from dataclasses import dataclass, field
from datetime import datetime

VALID_TOOL_STATUSES: frozenset[str] = frozenset({
    "pending",
    "approved",
    "rejected",
})


@dataclass
class Tool:
    """A row from the ``tools`` table.

    Attributes:
        id: Primary key.
        slug: URL-safe unique identifier.
        name: Display name.
        url: Homepage that gets probed.
        status: Review status (pending, approved, rejected).
        description: Optional long description.
        core_task: What the tool does without an account.
        archive_url: Wayback snapshot, set at most once.
        is_featured: Editorial highlight flag.
        repo_url: Optional source repository URL.
        github_stars: Cached star count.
        github_forks: Cached fork count.
        github_license: Cached SPDX license id.
        github_language: Cached primary language.
        github_fetched_at: When repository metadata was last fetched.
        tags: (key, value) tag pairs, when loaded.
    """

    id: int
    slug: str
    name: str
    url: str
    status: str = "approved"
    description: str | None = None
    core_task: str = ""
    archive_url: str | None = None
    is_featured: bool = False
    repo_url: str | None = None
    github_stars: int | None = None
    github_forks: int | None = None
    github_license: str | None = None
    github_language: str | None = None
    github_fetched_at: datetime | None = None
    tags: list[tuple[str, str]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.status not in VALID_TOOL_STATUSES:
            raise ValueError(
                f"Invalid status {self.status!r}. "
                f"Must be one of: {sorted(VALID_TOOL_STATUSES)}"
            )

    def tag_value(self, key: str) -> str | None:
        """Return the first tag value for ``key``, if any."""
        for tag_key, tag_value in self.tags:
            if tag_key == key:
                return tag_value
        return None


@dataclass
class RepoMetadata:
    """Repository metadata fetched from the GitHub REST API."""

    stars: int
    forks: int
    license: str | None
    language: str | None
    updated_at: datetime | None
