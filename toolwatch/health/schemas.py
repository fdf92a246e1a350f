"""Schema definitions for probe results and health check history."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

EffectiveStatus = Literal["online", "unstable", "offline"]


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single liveness probe.

    Attributes:
        is_online: True unless the host was unreachable or the resource is gone.
        http_status: Final HTTP status, or None if no response arrived.
        response_time_ms: Latency of the answering attempt, or None.
    """

    is_online: bool
    http_status: int | None = None
    response_time_ms: int | None = None


@dataclass(frozen=True)
class HealthCheckRecord:
    """An immutable row of the append-only ``health_checks`` table."""

    tool_id: int
    is_online: bool
    checked_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    http_status: int | None = None
    response_time_ms: int | None = None

    @classmethod
    def from_probe(
        cls,
        tool_id: int,
        result: ProbeResult,
        checked_at: datetime,
    ) -> "HealthCheckRecord":
        return cls(
            tool_id=tool_id,
            is_online=result.is_online,
            checked_at=checked_at,
            http_status=result.http_status,
            response_time_ms=result.response_time_ms,
        )


@dataclass
class HealthCycleResult:
    """Summary of one health reconciliation cycle."""

    trigger_source: str = "cron"
    tools_probed: int = 0
    online: int = 0
    offline: int = 0
    records_written: int = 0
    archives_triggered: list[int] = field(default_factory=list)
    records_pruned: int = 0
    errors: list[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0
