"""Status Resolver: smooth noisy probe history into one effective status.

A single recent success is trusted immediately, while going offline
requires every recent check to agree. Between those two the tool is
reported as unstable.
"""

from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from toolwatch.health.schemas import EffectiveStatus, HealthCheckRecord

DEFAULT_WINDOW_HOURS = 48
DEFAULT_TOLERANCE = 5


def resolve_effective_status(
    checks: Sequence[HealthCheckRecord],
    now: datetime | None = None,
    window_hours: int = DEFAULT_WINDOW_HOURS,
    tolerance: int = DEFAULT_TOLERANCE,
) -> EffectiveStatus | None:
    """
    Resolve an ordered probe history into online, unstable or offline.

    Args:
        checks: Health checks, most recent first
        now: Reference time (defaults to current UTC time)
        window_hours: Checks older than this are not live data
        tolerance: How many recent checks to inspect

    Returns:
        Effective status, or None when there is no fresh data
    """
    if not checks:
        return None

    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(hours=window_hours)

    latest = checks[0]
    if latest.checked_at < cutoff:
        return None

    if latest.is_online:
        return "online"

    recent = [c for c in checks[:tolerance] if c.checked_at >= cutoff]
    if any(c.is_online for c in recent):
        return "unstable"
    return "offline"


def is_sustained_offline(
    checks: Sequence[HealthCheckRecord],
    tolerance: int = DEFAULT_TOLERANCE,
) -> bool:
    """True if at least ``tolerance`` checks were loaded and all are offline.

    ``checks`` is expected to be pre-filtered to the freshness window.
    """
    if len(checks) < tolerance:
        return False
    return not any(c.is_online for c in checks[:tolerance])
