"""Badge Detector: classify whether a tool's own page shows the badge.

Classification is plain substring inspection of the homepage markup:

- ``explicit``: references the badge image or badge page on the site
- ``implicit``: carries the verification meta marker or mentions the site
- ``none``: neither, or the page could not be fetched successfully

Designed for external cron scheduling: ``0 4 * * * toolwatch badge-scan``
"""

import asyncio
import logging
import time
from datetime import datetime, timezone

import httpx

from toolwatch.badges.config import BadgeConfig
from toolwatch.badges.repository import BadgeDisplayRepository
from toolwatch.badges.schemas import BadgeCycleResult, BadgeDisplayRecord, DisplayType
from toolwatch.config.settings import get_settings
from toolwatch.observability.metrics import get_metrics
from toolwatch.observability.tracing import get_tracer, traced
from toolwatch.storage.database import Database
from toolwatch.storage.repository import ToolRepository
from toolwatch.storage.schemas import Tool

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


def classify_markup(html: str, site_host: str, meta_marker: str) -> DisplayType:
    """
    Classify badge display from raw page markup.

    Args:
        html: Homepage body
        site_host: Hostname of the verifying site (e.g. "nologin.tools")
        meta_marker: Marker string that counts as an implicit badge

    Returns:
        explicit, implicit or none
    """
    explicit_markers = (
        f"{site_host}/badge.svg",
        f"{site_host}/badge/",
        f"{site_host}/badges/",
    )
    if any(marker in html for marker in explicit_markers):
        return "explicit"
    if meta_marker in html or site_host in html:
        return "implicit"
    return "none"


class BadgeDetector:
    """
    Fetches homepages and classifies badge display.

    Usage:
        async with BadgeDetector(config, site_host="nologin.tools") as detector:
            display_type = await detector.detect("https://example.com")
    """

    def __init__(
        self,
        config: BadgeConfig | None = None,
        site_host: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._config = config or BadgeConfig()
        self._site_host = site_host or get_settings().site_hostname or ""
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "BadgeDetector":
        if self._client is None:
            self._client = httpx.AsyncClient(
                follow_redirects=True,
                headers={"User-Agent": self._config.user_agent},
                timeout=self._config.fetch_timeout_seconds,
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def detect(self, url: str) -> DisplayType:
        """Fetch ``url`` and classify it. Any failure yields ``none``."""
        if self._client is None:
            raise RuntimeError("BadgeDetector must be used as async context manager")

        try:
            async with asyncio.timeout(self._config.fetch_timeout_seconds):
                response = await self._client.get(url)
        except Exception as e:
            logger.debug("Badge fetch failed for %s: %s", url, e)
            return "none"

        if not response.is_success:
            return "none"

        return classify_markup(response.text, self._site_host, self._config.meta_marker)


async def run_badge_detection(
    database: Database,
    config: BadgeConfig | None = None,
    site_host: str | None = None,
    trigger_source: str = "cron",
) -> BadgeCycleResult:
    """
    Scan every approved tool's homepage and upsert its badge classification.

    Args:
        database: Connected Database instance (caller manages lifecycle).
        config: Badge configuration (default: from env).
        site_host: Verifying site hostname (default: from settings).
        trigger_source: "cron" or "manual".

    Returns:
        BadgeCycleResult with counts and any per-item errors.
    """
    config = config or BadgeConfig()
    result = BadgeCycleResult(trigger_source=trigger_source)
    start_time = time.monotonic()
    metrics = get_metrics()

    tool_repo = ToolRepository(database)
    badge_repo = BadgeDisplayRepository(database)

    with traced(tracer, "badge_cycle", {"trigger_source": trigger_source}):
        try:
            tools = await tool_repo.list_approved()
        except Exception as e:
            logger.exception("Failed to load approved tools")
            result.errors.append(f"load_tools: {e}")
            return _finish(result, start_time)

        now = datetime.now(timezone.utc)

        async with BadgeDetector(config, site_host=site_host) as detector:
            for i in range(0, len(tools), config.batch_size):
                batch = tools[i : i + config.batch_size]
                outcomes = await asyncio.gather(
                    *(detector.detect(tool.url) for tool in batch),
                    return_exceptions=True,
                )
                for tool, outcome in zip(batch, outcomes):
                    display_type = "none" if isinstance(outcome, BaseException) else outcome
                    await _store(tool, display_type, now, badge_repo, result)
                    metrics.record_badge(display_type)

    return _finish(result, start_time)


async def _store(
    tool: Tool,
    display_type: DisplayType,
    checked_at: datetime,
    badge_repo: BadgeDisplayRepository,
    result: BadgeCycleResult,
) -> None:
    result.tools_scanned += 1
    if display_type == "explicit":
        result.explicit += 1
    elif display_type == "implicit":
        result.implicit += 1
    else:
        result.none += 1

    try:
        await badge_repo.upsert(
            BadgeDisplayRecord(
                tool_id=tool.id,
                display_type=display_type,
                last_checked_at=checked_at,
            )
        )
        result.records_written += 1
    except Exception as e:
        logger.error("Failed to store badge display for tool %d: %s", tool.id, e)
        result.errors.append(f"upsert:{tool.id}: {e}")


def _finish(result: BadgeCycleResult, start_time: float) -> BadgeCycleResult:
    result.elapsed_seconds = time.monotonic() - start_time
    get_metrics().record_cycle("badges", result.elapsed_seconds, len(result.errors))
    logger.info(
        "Badge scan done: scanned=%d explicit=%d implicit=%d none=%d errors=%d (%.1fs)",
        result.tools_scanned,
        result.explicit,
        result.implicit,
        result.none,
        len(result.errors),
        result.elapsed_seconds,
    )
    return result
