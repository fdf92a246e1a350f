"""
Prometheus metrics for the reconciliation jobs.

Defines and exposes metrics for:
- Probe outcomes and latency
- Archival submissions
- Badge classifications
- Catalog export attempts and files written
- Repository metadata refreshes
- Notification issues
- Cycle durations per job

Metrics are exposed via HTTP endpoint for Prometheus scraping when the
long-running scheduler or the operator API is started.
"""

import logging

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    start_http_server,
)

from toolwatch.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for probe latency histograms (in seconds)
PROBE_LATENCY_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0)

# Buckets for whole-cycle durations (in seconds)
CYCLE_DURATION_BUCKETS = (1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0, 600.0)


class MetricsCollector:
    """
    Prometheus metrics collector for toolwatch.

    Usage:
        metrics = get_metrics()
        metrics.record_probe(is_online=True, latency=0.42)
        metrics.record_cycle("health", elapsed_seconds)
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """Initialize Prometheus metrics."""
        registry = registry if registry is not None else REGISTRY

        self.probes = Counter(
            "toolwatch_probes_total",
            "Total liveness probes issued",
            ["result"],  # online, offline, self
            registry=registry,
        )

        self.probe_latency = Histogram(
            "toolwatch_probe_latency_seconds",
            "Latency of successful liveness probes",
            buckets=PROBE_LATENCY_BUCKETS,
            registry=registry,
        )

        self.archive_submissions = Counter(
            "toolwatch_archive_submissions_total",
            "Archive submissions by outcome",
            ["outcome"],  # archived, already_set, failed
            registry=registry,
        )

        self.badge_classifications = Counter(
            "toolwatch_badge_classifications_total",
            "Badge display classifications",
            ["display_type"],
            registry=registry,
        )

        self.export_attempts = Counter(
            "toolwatch_export_attempts_total",
            "Catalog export attempts",
            ["status", "trigger_source"],
            registry=registry,
        )

        self.export_files_written = Counter(
            "toolwatch_export_files_written_total",
            "Artifacts written to the remote repository",
            ["filename"],
            registry=registry,
        )

        self.repo_refreshes = Counter(
            "toolwatch_repo_refreshes_total",
            "Repository metadata refreshes by outcome",
            ["outcome"],  # updated, invalid_url, failed
            registry=registry,
        )

        self.notifications = Counter(
            "toolwatch_notifications_total",
            "Notification issue attempts by outcome",
            ["outcome"],  # created, error
            registry=registry,
        )

        self.cycle_duration = Histogram(
            "toolwatch_cycle_duration_seconds",
            "Wall time of a reconciliation cycle",
            ["job"],
            buckets=CYCLE_DURATION_BUCKETS,
            registry=registry,
        )

        self.cycle_errors = Counter(
            "toolwatch_cycle_errors_total",
            "Per-item errors recorded during a cycle",
            ["job"],
            registry=registry,
        )

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to listen on (default from settings)
        """
        port = port or get_settings().metrics_port
        start_http_server(port)
        logger.info("Metrics server started on port %d", port)

    def record_probe(
        self,
        is_online: bool,
        latency: float | None = None,
        self_reference: bool = False,
    ) -> None:
        """
        Record a liveness probe outcome.

        Args:
            is_online: Probe classification
            latency: Response latency in seconds, if a response arrived
            self_reference: True if the probe was short-circuited
        """
        if self_reference:
            result = "self"
        else:
            result = "online" if is_online else "offline"
        self.probes.labels(result=result).inc()
        if latency is not None and not self_reference:
            self.probe_latency.observe(latency)

    def record_archive(self, outcome: str) -> None:
        """Record an archival submission outcome."""
        self.archive_submissions.labels(outcome=outcome).inc()

    def record_badge(self, display_type: str) -> None:
        """Record a badge classification."""
        self.badge_classifications.labels(display_type=display_type).inc()

    def record_export(
        self,
        status: str,
        trigger_source: str,
        files_updated: list[str],
    ) -> None:
        """
        Record a catalog export attempt.

        Args:
            status: success or error
            trigger_source: manual or cron
            files_updated: Filenames written during this attempt
        """
        self.export_attempts.labels(status=status, trigger_source=trigger_source).inc()
        for filename in files_updated:
            self.export_files_written.labels(filename=filename).inc()

    def record_repo_refresh(self, outcome: str) -> None:
        """Record a repository metadata refresh outcome."""
        self.repo_refreshes.labels(outcome=outcome).inc()

    def record_notification(self, outcome: str) -> None:
        """Record a notification issue outcome."""
        self.notifications.labels(outcome=outcome).inc()

    def record_cycle(self, job: str, elapsed_seconds: float, errors: int = 0) -> None:
        """
        Record a finished cycle.

        Args:
            job: Job name (health, badges, export, repo_refresh)
            elapsed_seconds: Wall time of the cycle
            errors: Number of per-item errors in the cycle
        """
        self.cycle_duration.labels(job=job).observe(elapsed_seconds)
        if errors:
            self.cycle_errors.labels(job=job).inc(errors)


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
