"""Archival Trigger: best-effort, write-once snapshot of an offline tool."""

import logging

from toolwatch.archive.client import WaybackArchiver
from toolwatch.config.settings import Settings
from toolwatch.observability.metrics import get_metrics
from toolwatch.storage.repository import ToolRepository

logger = logging.getLogger(__name__)


class ArchivalTrigger:
    """
    Snapshots a tool's URL and records the snapshot on the tool.

    Failures never propagate. A tool that stays offline will be offered
    again on a later health cycle, which is the only recovery path.
    Concurrent triggers for one tool are harmless: the submission is
    repeatable and ``archive_url`` is only written while it is NULL.
    """

    def __init__(self, tool_repository: ToolRepository, archiver: WaybackArchiver):
        self._tools = tool_repository
        self._archiver = archiver
        self._metrics = get_metrics()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        tool_repository: ToolRepository,
    ) -> "ArchivalTrigger | None":
        """Build a trigger if archive.org credentials are configured."""
        if not settings.archive_configured:
            return None
        return cls(
            tool_repository,
            WaybackArchiver(
                settings.archive_org_access_key,
                settings.archive_org_secret_key,
            ),
        )

    async def archive(self, tool_id: int, url: str) -> str | None:
        """
        Submit ``url`` for capture and set the tool's archive URL once.

        Returns:
            The snapshot URL if this call wrote it, otherwise None
        """
        try:
            snapshot = await self._archiver.save(url)
            if snapshot is None:
                self._metrics.record_archive("failed")
                return None

            if not await self._tools.set_archive_url(tool_id, snapshot):
                logger.info("Tool %d already archived, keeping existing URL", tool_id)
                self._metrics.record_archive("already_set")
                return None
        except Exception as e:
            logger.warning("Archival failed for tool %d (%s): %s", tool_id, url, e)
            self._metrics.record_archive("failed")
            return None

        logger.info("Archived tool %d: %s", tool_id, snapshot)
        self._metrics.record_archive("archived")
        return snapshot
