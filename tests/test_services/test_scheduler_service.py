"""Tests for the interval scheduler."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from toolwatch.services.config import SchedulerConfig
from toolwatch.services.scheduler_service import SchedulerService

MODULE = "toolwatch.services.scheduler_service"


@pytest.fixture
def config():
    # Long intervals: each job runs once on start, then sleeps
    return SchedulerConfig(
        health_interval_hours=1,
        badge_interval_hours=1,
        export_interval_hours=1,
        repo_refresh_interval_hours=1,
        drain_timeout_seconds=1,
    )


async def _run_briefly(service: SchedulerService, seconds: float = 0.05) -> None:
    task = asyncio.create_task(service.start())
    await asyncio.sleep(seconds)
    await service.stop()
    await asyncio.wait_for(task, timeout=2)


class TestSchedulerService:

    @pytest.mark.asyncio
    async def test_runs_every_job_on_start(self, config, mock_db):
        with (
            patch(f"{MODULE}.run_health_checks", new_callable=AsyncMock) as health,
            patch(f"{MODULE}.run_badge_detection", new_callable=AsyncMock) as badges,
            patch(f"{MODULE}.run_data_export", new_callable=AsyncMock) as export,
            patch(f"{MODULE}.run_repo_refresh", new_callable=AsyncMock) as refresh,
        ):
            service = SchedulerService(config=config, database=mock_db)
            await _run_briefly(service)

        health.assert_awaited_once()
        assert health.await_args.kwargs["background"] is service._background
        badges.assert_awaited_once_with(mock_db)
        export.assert_awaited_once_with(mock_db, trigger_source="cron")
        refresh.assert_awaited_once_with(mock_db)
        assert service.runs == {"health": 1, "badges": 1, "export": 1, "repo_refresh": 1}
        mock_db.connect.assert_awaited_once()
        mock_db.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failing_job_does_not_stop_others(self, config, mock_db):
        with (
            patch(f"{MODULE}.run_health_checks", new_callable=AsyncMock),
            patch(f"{MODULE}.run_badge_detection", new_callable=AsyncMock,
                  side_effect=RuntimeError("boom")),
            patch(f"{MODULE}.run_data_export", new_callable=AsyncMock),
            patch(f"{MODULE}.run_repo_refresh", new_callable=AsyncMock),
        ):
            service = SchedulerService(config=config, database=mock_db)
            await _run_briefly(service)

        assert "badges" not in service.runs
        assert service.runs["health"] == 1
        assert service.runs["export"] == 1

    @pytest.mark.asyncio
    async def test_delayed_start(self, config, mock_db):
        with (
            patch(f"{MODULE}.run_health_checks", new_callable=AsyncMock) as health,
            patch(f"{MODULE}.run_badge_detection", new_callable=AsyncMock),
            patch(f"{MODULE}.run_data_export", new_callable=AsyncMock),
            patch(f"{MODULE}.run_repo_refresh", new_callable=AsyncMock),
        ):
            service = SchedulerService(config=config, database=mock_db, run_on_start=False)
            await _run_briefly(service)

        health.assert_not_awaited()
        assert service.runs == {}

    def test_job_intervals(self, mock_db):
        service = SchedulerService(database=mock_db)
        intervals = {name: interval for name, (interval, _) in service.jobs().items()}

        assert intervals == {
            "health": 6 * 3600,
            "badges": 24 * 3600,
            "export": 24 * 3600,
            "repo_refresh": 24 * 3600,
        }
