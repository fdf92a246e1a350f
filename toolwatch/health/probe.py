"""Probe Executor: one bounded-latency liveness check against one URL.

The probe measures whether a host/path still exists, not whether the
service is healthy. Only "resource gone" statuses count as offline; a 500
or 403 still proves something is being served at that address.

Each attempt carries its own deadline. The lightweight HEAD attempt and
the GET fallback never share a budget, so a slow HEAD cannot starve the
GET that follows it.
"""

import asyncio
import logging
import time
from types import TracebackType
from urllib.parse import urlparse

import httpx

from toolwatch.health.config import HealthConfig
from toolwatch.health.schemas import ProbeResult
from toolwatch.observability.metrics import get_metrics

logger = logging.getLogger(__name__)

# Status codes that indicate the page is gone (not merely blocked or erroring)
GONE_STATUS_CODES: frozenset[int] = frozenset({404, 410})

SELF_REFERENCE_RESULT = ProbeResult(is_online=True, http_status=200, response_time_ms=0)


def is_reachable(status_code: int) -> bool:
    """Return True if the HTTP status indicates the resource still exists."""
    return status_code not in GONE_STATUS_CODES


def is_self_reference(url: str, site_url: str | None) -> bool:
    """True if ``url`` points at the same hostname as ``site_url``."""
    if not site_url:
        return False
    try:
        target = urlparse(url).hostname
        own = urlparse(site_url).hostname
    except ValueError:
        return False
    return target is not None and target == own


class ProbeExecutor:
    """Issues HEAD-then-GET liveness probes with per-attempt deadlines.

    Usage:
        async with ProbeExecutor(config, site_url="https://nologin.tools") as probe:
            result = await probe.probe("https://example.com")
    """

    def __init__(
        self,
        config: HealthConfig | None = None,
        site_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or HealthConfig()
        self._site_url = site_url
        self._client = client
        self._owns_client = client is None
        self._metrics = get_metrics()

    async def __aenter__(self) -> "ProbeExecutor":
        if self._client is None:
            self._client = httpx.AsyncClient(
                follow_redirects=True,
                headers={"User-Agent": self._config.user_agent},
                timeout=self._config.probe_timeout_seconds,
            )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def probe(self, url: str) -> ProbeResult:
        """Probe ``url`` and classify the outcome.

        Never raises: any failure to get an answer becomes an offline
        result with null status and latency.
        """
        if is_self_reference(url, self._site_url):
            self._metrics.record_probe(True, self_reference=True)
            return SELF_REFERENCE_RESULT

        head: tuple[int, int] | None = None
        try:
            head = await self._attempt("HEAD", url)
        except Exception as e:
            logger.debug("HEAD probe failed for %s: %s", url, e)

        if head is not None and 200 <= head[0] < 300:
            return self._classify(*head)

        try:
            return self._classify(*await self._attempt("GET", url))
        except Exception as e:
            logger.debug("GET probe failed for %s: %s", url, e)

        # The host answered HEAD but the fallback died; the HEAD answer stands.
        if head is not None:
            return self._classify(*head)

        self._metrics.record_probe(False)
        return ProbeResult(is_online=False, http_status=None, response_time_ms=None)

    async def _attempt(self, method: str, url: str) -> tuple[int, int]:
        """Run one request under its own deadline.

        Only the status line is needed, so the body is never read.

        Returns:
            (status_code, elapsed_ms)
        """
        if self._client is None:
            raise RuntimeError("ProbeExecutor must be used as async context manager")

        start = time.monotonic()
        async with asyncio.timeout(self._config.probe_timeout_seconds):
            async with self._client.stream(method, url) as response:
                status_code = response.status_code
        elapsed_ms = int((time.monotonic() - start) * 1000)
        return status_code, elapsed_ms

    def _classify(self, status_code: int, elapsed_ms: int) -> ProbeResult:
        online = is_reachable(status_code)
        self._metrics.record_probe(online, latency=elapsed_ms / 1000)
        return ProbeResult(
            is_online=online,
            http_status=status_code,
            response_time_ms=elapsed_ms,
        )
