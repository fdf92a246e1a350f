"""Badge display detection on tools' own homepages."""

from toolwatch.badges.config import BadgeConfig
from toolwatch.badges.detector import BadgeDetector, classify_markup, run_badge_detection
from toolwatch.badges.repository import BadgeDisplayRepository
from toolwatch.badges.schemas import (
    VALID_DISPLAY_TYPES,
    BadgeCycleResult,
    BadgeDisplayRecord,
    DisplayType,
)

__all__ = [
    "VALID_DISPLAY_TYPES",
    "BadgeConfig",
    "BadgeCycleResult",
    "BadgeDetector",
    "BadgeDisplayRecord",
    "BadgeDisplayRepository",
    "DisplayType",
    "classify_markup",
    "run_badge_detection",
]
