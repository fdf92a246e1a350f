"""Schema definitions for notification idempotency records."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

VALID_NOTIFICATION_STATUSES: frozenset[str] = frozenset({"created", "error"})


@dataclass
class GitHubNotification:
    """
    The single notification record kept per tool.

    A ``created`` record blocks re-notification unless forced.
    """

    tool_id: int
    status: str = "created"
    issue_url: str | None = None
    issue_number: int | None = None
    error_message: str | None = None
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def __post_init__(self) -> None:
        if self.status not in VALID_NOTIFICATION_STATUSES:
            raise ValueError(
                f"Invalid status {self.status!r}. "
                f"Must be one of: {sorted(VALID_NOTIFICATION_STATUSES)}"
            )

    @property
    def is_created(self) -> bool:
        return self.status == "created"
