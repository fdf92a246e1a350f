"""Tests for the Prometheus metrics collector."""

import pytest
from prometheus_client import CollectorRegistry

from toolwatch.observability.metrics import MetricsCollector, get_metrics


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def metrics(registry):
    return MetricsCollector(registry=registry)


class TestMetricsCollector:

    def test_probe_outcomes(self, metrics, registry):
        metrics.record_probe(True, latency=0.2)
        metrics.record_probe(False)
        metrics.record_probe(True, latency=0.0, self_reference=True)

        assert registry.get_sample_value("toolwatch_probes_total", {"result": "online"}) == 1
        assert registry.get_sample_value("toolwatch_probes_total", {"result": "offline"}) == 1
        assert registry.get_sample_value("toolwatch_probes_total", {"result": "self"}) == 1
        # Self-references are not timed
        assert registry.get_sample_value("toolwatch_probe_latency_seconds_count") == 1

    def test_export_counts_files(self, metrics, registry):
        metrics.record_export("success", "cron", ["tools.json", "README.md"])
        metrics.record_export("success", "manual", [])

        assert registry.get_sample_value(
            "toolwatch_export_attempts_total", {"status": "success", "trigger_source": "cron"}
        ) == 1
        assert registry.get_sample_value(
            "toolwatch_export_files_written_total", {"filename": "README.md"}
        ) == 1

    def test_cycle_errors_only_when_present(self, metrics, registry):
        metrics.record_cycle("badges", 3.0)
        metrics.record_cycle("health", 2.0, errors=2)

        assert registry.get_sample_value("toolwatch_cycle_duration_seconds_count", {"job": "badges"}) == 1
        assert registry.get_sample_value("toolwatch_cycle_errors_total", {"job": "badges"}) is None
        assert registry.get_sample_value("toolwatch_cycle_errors_total", {"job": "health"}) == 2

    def test_outcome_counters(self, metrics, registry):
        metrics.record_archive("archived")
        metrics.record_badge("implicit")
        metrics.record_repo_refresh("invalid_url")
        metrics.record_notification("created")

        assert registry.get_sample_value("toolwatch_archive_submissions_total", {"outcome": "archived"}) == 1
        assert registry.get_sample_value(
            "toolwatch_badge_classifications_total", {"display_type": "implicit"}
        ) == 1
        assert registry.get_sample_value("toolwatch_repo_refreshes_total", {"outcome": "invalid_url"}) == 1
        assert registry.get_sample_value("toolwatch_notifications_total", {"outcome": "created"}) == 1


def test_get_metrics_is_singleton():
    assert get_metrics() is get_metrics()
