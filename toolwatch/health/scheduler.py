"""Health reconciliation cycle.

Each invocation:
1. Randomly samples a bounded number of approved tools
2. Probes them in small batches, joining every probe in a batch
3. Appends one health check per probed tool, isolating write failures
4. Hands tools with sustained failure to the Archival Trigger in the background
5. Prunes history past the retention window

Designed for external cron scheduling: ``0 */6 * * * toolwatch health-check``
"""

import asyncio
import logging
import time
from collections.abc import Iterator, Sequence
from datetime import datetime, timedelta, timezone

from toolwatch.archive.trigger import ArchivalTrigger
from toolwatch.config.settings import get_settings
from toolwatch.health.config import HealthConfig
from toolwatch.health.probe import ProbeExecutor
from toolwatch.health.repository import HealthCheckRepository
from toolwatch.health.resolver import is_sustained_offline, resolve_effective_status
from toolwatch.health.schemas import (
    EffectiveStatus,
    HealthCheckRecord,
    HealthCycleResult,
    ProbeResult,
)
from toolwatch.observability.metrics import get_metrics
from toolwatch.observability.tracing import get_tracer, traced
from toolwatch.services.background import BackgroundTaskGroup
from toolwatch.storage.database import Database
from toolwatch.storage.repository import ToolRepository
from toolwatch.storage.schemas import Tool

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


def _chunks(items: Sequence[Tool], size: int) -> Iterator[Sequence[Tool]]:
    for i in range(0, len(items), size):
        yield items[i : i + size]


async def run_health_checks(
    database: Database,
    config: HealthConfig | None = None,
    archival: ArchivalTrigger | None = None,
    background: BackgroundTaskGroup | None = None,
    site_url: str | None = None,
    trigger_source: str = "cron",
) -> HealthCycleResult:
    """
    Run one health reconciliation cycle.

    Args:
        database: Connected Database instance (caller manages lifecycle).
        config: Health configuration (default: from env).
        archival: Archival trigger (default: built from settings, if keyed).
        background: Task group for detached archival. When omitted, a
            private group is drained before returning.
        site_url: Self-site URL for the self-reference short-circuit.
        trigger_source: "cron" or "manual", for logs and metrics.

    Returns:
        HealthCycleResult with counts and any per-item errors.
    """
    config = config or HealthConfig()
    settings = get_settings()
    site_url = site_url if site_url is not None else settings.site_url
    result = HealthCycleResult(trigger_source=trigger_source)
    start_time = time.monotonic()

    tool_repo = ToolRepository(database)
    health_repo = HealthCheckRepository(database)
    if archival is None:
        archival = ArchivalTrigger.from_settings(settings, tool_repo)

    owns_background = background is None
    if background is None:
        background = BackgroundTaskGroup()

    with traced(tracer, "health_cycle", {"trigger_source": trigger_source}):
        try:
            tools = await tool_repo.sample_approved(config.sample_size)
        except Exception as e:
            logger.exception("Failed to sample tools")
            result.errors.append(f"sample_tools: {e}")
            return _finish(result, start_time)

        logger.info("Health cycle: probing %d tools", len(tools))

        async with ProbeExecutor(config, site_url=site_url) as executor:
            for batch in _chunks(tools, config.batch_size):
                outcomes = await asyncio.gather(
                    *(executor.probe(tool.url) for tool in batch),
                    return_exceptions=True,
                )
                checked_at = datetime.now(timezone.utc)

                for tool, outcome in zip(batch, outcomes):
                    if isinstance(outcome, BaseException):
                        logger.error("Probe crashed for tool %d: %s", tool.id, outcome)
                        outcome = ProbeResult(is_online=False)

                    await _record_outcome(
                        tool,
                        outcome,
                        checked_at,
                        health_repo,
                        archival,
                        background,
                        config,
                        result,
                    )

        try:
            cutoff = datetime.now(timezone.utc) - timedelta(days=config.retention_days)
            result.records_pruned = await health_repo.delete_older_than(cutoff)
        except Exception as e:
            logger.exception("Failed to prune health checks")
            result.errors.append(f"prune: {e}")

    if owns_background:
        await background.drain()

    return _finish(result, start_time)


async def _record_outcome(
    tool: Tool,
    outcome: ProbeResult,
    checked_at: datetime,
    health_repo: HealthCheckRepository,
    archival: ArchivalTrigger | None,
    background: BackgroundTaskGroup,
    config: HealthConfig,
    result: HealthCycleResult,
) -> None:
    """Persist one probe outcome and apply the archival gate."""
    result.tools_probed += 1
    if outcome.is_online:
        result.online += 1
    else:
        result.offline += 1

    try:
        await health_repo.insert(HealthCheckRecord.from_probe(tool.id, outcome, checked_at))
        result.records_written += 1
    except Exception as e:
        logger.error("Failed to persist health check for tool %d: %s", tool.id, e)
        result.errors.append(f"persist:{tool.id}: {e}")
        return

    if outcome.is_online or tool.archive_url or archival is None:
        return

    try:
        since = checked_at - timedelta(hours=config.window_hours)
        recent = await health_repo.recent_checks(tool.id, since=since, limit=config.tolerance)
    except Exception as e:
        logger.error("Failed to read history for tool %d: %s", tool.id, e)
        result.errors.append(f"history:{tool.id}: {e}")
        return

    if is_sustained_offline(recent, config.tolerance):
        logger.info(
            "Tool %d offline for %d consecutive checks, archiving %s",
            tool.id,
            len(recent),
            tool.url,
        )
        background.spawn(archival.archive(tool.id, tool.url), name=f"archive-{tool.id}")
        result.archives_triggered.append(tool.id)


def _finish(result: HealthCycleResult, start_time: float) -> HealthCycleResult:
    result.elapsed_seconds = time.monotonic() - start_time
    get_metrics().record_cycle("health", result.elapsed_seconds, len(result.errors))
    logger.info(
        "Health cycle done: probed=%d online=%d offline=%d archived=%d pruned=%d errors=%d (%.1fs)",
        result.tools_probed,
        result.online,
        result.offline,
        len(result.archives_triggered),
        result.records_pruned,
        len(result.errors),
        result.elapsed_seconds,
    )
    return result


async def check_tool(
    database: Database,
    tool_id: int,
    config: HealthConfig | None = None,
    site_url: str | None = None,
) -> ProbeResult | None:
    """
    Probe one tool on demand and append the outcome to its history.

    No archival decision is made here; that belongs to the cycle.

    Returns:
        The probe result, or None if the tool does not exist.
    """
    config = config or HealthConfig()
    if site_url is None:
        site_url = get_settings().site_url

    tool = await ToolRepository(database).get_by_id(tool_id)
    if tool is None:
        return None

    async with ProbeExecutor(config, site_url=site_url) as executor:
        outcome = await executor.probe(tool.url)

    await HealthCheckRepository(database).insert(
        HealthCheckRecord.from_probe(tool.id, outcome, datetime.now(timezone.utc))
    )
    return outcome


async def get_effective_status(
    database: Database,
    tool_id: int,
    config: HealthConfig | None = None,
    now: datetime | None = None,
) -> EffectiveStatus | None:
    """Resolve a tool's effective status from its most recent checks."""
    config = config or HealthConfig()
    checks = await HealthCheckRepository(database).recent_checks(
        tool_id, limit=config.tolerance
    )
    return resolve_effective_status(
        checks,
        now=now,
        window_hours=config.window_hours,
        tolerance=config.tolerance,
    )
