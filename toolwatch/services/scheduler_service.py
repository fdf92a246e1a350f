"""
Interval scheduler - runs every reconciliation job on its own cadence.

An alternative to external cron for single-host deployments. Each job
runs in its own loop task; jobs never call each other and share only the
database and the background task group.

Features:
- Independent per-job intervals (health 6h, badges/export/repo 24h)
- One failing cycle never stops its loop
- Graceful shutdown that drains detached archival work
- Metrics collection
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from toolwatch.badges.detector import run_badge_detection
from toolwatch.export.service import run_data_export
from toolwatch.health.scheduler import run_health_checks
from toolwatch.observability.logging import bind_context
from toolwatch.repometa.refresher import run_repo_refresh
from toolwatch.services.background import BackgroundTaskGroup
from toolwatch.services.config import SchedulerConfig
from toolwatch.storage.database import Database

logger = structlog.get_logger(__name__)

JobRunner = Callable[[], Awaitable[Any]]


class SchedulerService:
    """
    Service that runs the reconciliation jobs periodically.

    Usage:
        service = SchedulerService()
        await service.start()  # Runs until stopped
    """

    def __init__(
        self,
        config: SchedulerConfig | None = None,
        database: Database | None = None,
        run_on_start: bool = True,
    ):
        """
        Initialize scheduler service.

        Args:
            config: Job cadences (default: from env)
            database: Database (or create from settings)
            run_on_start: Run every job immediately instead of after one interval
        """
        self._config = config or SchedulerConfig()
        self._database = database or Database()
        self._background = BackgroundTaskGroup()
        self._run_on_start = run_on_start
        self._running = False
        self._tasks: list[asyncio.Task] = []
        self.runs: dict[str, int] = {}

        logger.info(
            "Scheduler service initialized",
            health_hours=self._config.health_interval_hours,
            badge_hours=self._config.badge_interval_hours,
            export_hours=self._config.export_interval_hours,
            repo_refresh_hours=self._config.repo_refresh_interval_hours,
        )

    def jobs(self) -> dict[str, tuple[float, JobRunner]]:
        """Job name -> (interval in seconds, runner)."""
        db = self._database
        return {
            "health": (
                self._config.health_interval_hours * 3600,
                lambda: run_health_checks(db, background=self._background),
            ),
            "badges": (
                self._config.badge_interval_hours * 3600,
                lambda: run_badge_detection(db),
            ),
            "export": (
                self._config.export_interval_hours * 3600,
                lambda: run_data_export(db, trigger_source="cron"),
            ),
            "repo_refresh": (
                self._config.repo_refresh_interval_hours * 3600,
                lambda: run_repo_refresh(db),
            ),
        }

    async def start(self) -> None:
        """
        Start the scheduler.

        Runs until stop() is called or a fatal error occurs.
        """
        self._running = True
        logger.info("Starting scheduler service")

        await self._database.connect()

        try:
            self._tasks = [
                asyncio.create_task(
                    self._run_job(name, interval, runner),
                    name=f"job_{name}",
                )
                for name, (interval, runner) in self.jobs().items()
            ]
            await asyncio.gather(*self._tasks, return_exceptions=True)

        except asyncio.CancelledError:
            logger.info("Scheduler service cancelled")
        except Exception as e:
            logger.error("Scheduler service error", error=str(e))
            raise
        finally:
            await self._cleanup()

    async def stop(self) -> None:
        """Stop the scheduler gracefully."""
        logger.info("Stopping scheduler service")
        self._running = False

        for task in self._tasks:
            task.cancel()

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _cleanup(self) -> None:
        """Finish detached work, then release the database."""
        await self._background.drain(timeout=self._config.drain_timeout_seconds)
        await self._database.close()
        self._tasks.clear()
        logger.info("Scheduler service cleaned up")

    async def _run_job(self, name: str, interval: float, runner: JobRunner) -> None:
        """
        Run a single job in a loop.

        Args:
            name: Job name, for logs
            interval: Seconds between the start of one run and the next
            runner: Zero-argument coroutine factory running one cycle
        """
        bind_context(job=name)
        logger.info("Starting job loop", job=name, interval_seconds=interval)

        if not self._run_on_start:
            await asyncio.sleep(interval)

        while self._running:
            start_time = time.monotonic()
            try:
                await runner()
                self.runs[name] = self.runs.get(name, 0) + 1
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Job cycle failed", job=name, error=str(e))

            elapsed = time.monotonic() - start_time
            await asyncio.sleep(max(0.0, interval - elapsed))

        logger.info("Job loop stopped", job=name)
