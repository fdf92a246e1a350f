"""Schema definitions for badge display records."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

DisplayType = Literal["explicit", "implicit", "none"]

VALID_DISPLAY_TYPES: frozenset[str] = frozenset({"explicit", "implicit", "none"})


@dataclass
class BadgeDisplayRecord:
    """
    Latest badge classification for one tool.

    Attributes:
        tool_id: Tool the record belongs to (unique).
        display_type: explicit, implicit or none.
        last_checked_at: When the homepage was last scanned.
    """

    tool_id: int
    display_type: DisplayType = "none"
    last_checked_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def __post_init__(self) -> None:
        if self.display_type not in VALID_DISPLAY_TYPES:
            raise ValueError(
                f"Invalid display_type {self.display_type!r}. "
                f"Must be one of: {sorted(VALID_DISPLAY_TYPES)}"
            )


@dataclass
class BadgeCycleResult:
    """Summary of one badge detection cycle."""

    trigger_source: str = "cron"
    tools_scanned: int = 0
    explicit: int = 0
    implicit: int = 0
    none: int = 0
    records_written: int = 0
    errors: list[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0
