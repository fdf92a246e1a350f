"""
Detached background work that must still finish.

Fire-and-forget side effects (archival submissions) are spawned here
instead of with a bare ``asyncio.create_task``. The owner of the group
(a CLI command, an API request handler, the interval scheduler) calls
``drain()`` before its context ends, so work started by a cycle is
never cancelled just because the cycle returned.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class BackgroundTaskGroup:
    """
    Tracks detached tasks and awaits them on drain.

    Usage:
        background = BackgroundTaskGroup()
        background.spawn(archiver.archive(tool), name="archive-42")
        ...
        await background.drain(timeout=120)
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()
        self._completed = 0
        self._failed = 0

    @property
    def pending(self) -> int:
        """Number of tasks still running."""
        return len(self._tasks)

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def failed(self) -> int:
        return self._failed

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task:
        """Schedule ``coro`` without awaiting it."""
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._failed += 1
            logger.error(
                "Background task failed",
                task=task.get_name(),
                error=str(exc),
            )
        else:
            self._completed += 1

    async def drain(self, timeout: float | None = None) -> None:
        """
        Wait for all spawned tasks, including ones spawned while draining.

        Args:
            timeout: Give up (and cancel leftovers) after this many seconds
        """
        if not self._tasks:
            return

        logger.info("Draining background tasks", pending=len(self._tasks))
        try:
            async with asyncio.timeout(timeout):
                while self._tasks:
                    await asyncio.gather(*list(self._tasks), return_exceptions=True)
        except TimeoutError:
            leftovers = list(self._tasks)
            logger.warning(
                "Background drain timed out, cancelling tasks",
                cancelled=len(leftovers),
            )
            for task in leftovers:
                task.cancel()
            await asyncio.gather(*leftovers, return_exceptions=True)
