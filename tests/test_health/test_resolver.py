"""Tests for the Status Resolver."""

import random

import pytest

from toolwatch.health.resolver import is_sustained_offline, resolve_effective_status
from tests.conftest import NOW, make_check


class TestResolveEffectiveStatus:
    """Scenario tests for resolve_effective_status()."""

    def test_empty_history_is_unknown(self):
        assert resolve_effective_status([], now=NOW) is None

    def test_single_online_check(self):
        assert resolve_effective_status([make_check(True)], now=NOW) == "online"

    def test_recent_failure_with_earlier_success_is_unstable(self):
        checks = [
            make_check(False, hours_ago=0),
            make_check(True, hours_ago=1),
            make_check(False, hours_ago=2),
        ]
        assert resolve_effective_status(checks, now=NOW) == "unstable"

    def test_five_offline_checks(self):
        checks = [make_check(False, hours_ago=h) for h in range(5)]
        assert resolve_effective_status(checks, now=NOW) == "offline"

    def test_single_offline_check_is_offline(self):
        assert resolve_effective_status([make_check(False)], now=NOW) == "offline"

    def test_stale_latest_check_is_unknown(self):
        """Data older than the window must not be reported as live."""
        checks = [make_check(True, hours_ago=49), make_check(True, hours_ago=50)]
        assert resolve_effective_status(checks, now=NOW) is None

    def test_window_boundary_is_inclusive(self):
        assert resolve_effective_status([make_check(False, hours_ago=48)], now=NOW) == "offline"

    def test_online_outside_tolerance_is_ignored(self):
        """Only the most recent ``tolerance`` checks are inspected."""
        checks = [make_check(False, hours_ago=h) for h in range(5)]
        checks.append(make_check(True, hours_ago=6))
        assert resolve_effective_status(checks, now=NOW) == "offline"

    def test_online_outside_window_is_ignored(self):
        checks = [
            make_check(False, hours_ago=1),
            make_check(False, hours_ago=2),
            make_check(True, hours_ago=60),
        ]
        assert resolve_effective_status(checks, now=NOW) == "offline"

    def test_custom_tolerance(self):
        checks = [
            make_check(False, hours_ago=0),
            make_check(False, hours_ago=1),
            make_check(True, hours_ago=2),
        ]
        assert resolve_effective_status(checks, now=NOW, tolerance=2) == "offline"
        assert resolve_effective_status(checks, now=NOW, tolerance=3) == "unstable"

    def test_custom_window(self):
        checks = [make_check(True, hours_ago=10)]
        assert resolve_effective_status(checks, now=NOW, window_hours=6) is None


class TestResolverLaws:
    """Randomized checks of the resolver's laws."""

    @pytest.fixture
    def rng(self):
        return random.Random(1234)

    def _history(self, rng, length):
        hours = sorted(rng.uniform(0, 47) for _ in range(length))
        return [make_check(rng.random() < 0.5, hours_ago=h) for h in hours]

    def test_fast_recovery(self, rng):
        for _ in range(200):
            history = self._history(rng, rng.randint(0, 8))
            checks = [make_check(True, hours_ago=0)] + history
            assert resolve_effective_status(checks, now=NOW) == "online"

    def test_all_offline_window_is_offline(self, rng):
        for _ in range(200):
            length = rng.randint(1, 5)
            hours = sorted(rng.uniform(0, 47) for _ in range(length))
            checks = [make_check(False, hours_ago=h) for h in hours]
            assert resolve_effective_status(checks, now=NOW) == "offline"

    def test_mixed_window_is_unstable(self, rng):
        for _ in range(200):
            length = rng.randint(2, 5)
            hours = sorted(rng.uniform(0, 47) for _ in range(length))
            checks = [make_check(False, hours_ago=hours[0])]
            online_at = rng.randint(1, length - 1)
            for i, h in enumerate(hours[1:], start=1):
                checks.append(make_check(i == online_at or rng.random() < 0.3, hours_ago=h))
            assert resolve_effective_status(checks, now=NOW) == "unstable"

    def test_stale_history_is_unknown(self, rng):
        for _ in range(200):
            length = rng.randint(1, 6)
            hours = sorted(rng.uniform(48.01, 500) for _ in range(length))
            checks = [make_check(rng.random() < 0.5, hours_ago=h) for h in hours]
            assert resolve_effective_status(checks, now=NOW) is None

    def test_deterministic(self, rng):
        for _ in range(50):
            checks = self._history(rng, rng.randint(0, 8))
            assert resolve_effective_status(checks, now=NOW) == resolve_effective_status(
                checks, now=NOW
            )


class TestIsSustainedOffline:
    """Tests for the archival gate."""

    def test_requires_full_tolerance(self):
        checks = [make_check(False, hours_ago=h) for h in range(4)]
        assert is_sustained_offline(checks, tolerance=5) is False

    def test_all_offline(self):
        checks = [make_check(False, hours_ago=h) for h in range(5)]
        assert is_sustained_offline(checks, tolerance=5) is True

    def test_any_online_blocks(self):
        checks = [make_check(False, hours_ago=h) for h in range(4)]
        checks.insert(2, make_check(True, hours_ago=1.5))
        assert is_sustained_offline(checks, tolerance=5) is False

    def test_empty(self):
        assert is_sustained_offline([], tolerance=5) is False
