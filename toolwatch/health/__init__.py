"""Liveness probing, status resolution, and the health reconciliation cycle."""

from toolwatch.health.config import HealthConfig
from toolwatch.health.probe import GONE_STATUS_CODES, ProbeExecutor, is_reachable
from toolwatch.health.repository import HealthCheckRepository
from toolwatch.health.resolver import is_sustained_offline, resolve_effective_status
from toolwatch.health.scheduler import check_tool, get_effective_status, run_health_checks
from toolwatch.health.schemas import (
    EffectiveStatus,
    HealthCheckRecord,
    HealthCycleResult,
    ProbeResult,
)

__all__ = [
    "GONE_STATUS_CODES",
    "EffectiveStatus",
    "HealthCheckRecord",
    "HealthCheckRepository",
    "HealthConfig",
    "HealthCycleResult",
    "ProbeExecutor",
    "ProbeResult",
    "check_tool",
    "get_effective_status",
    "is_reachable",
    "is_sustained_offline",
    "resolve_effective_status",
    "run_health_checks",
]
