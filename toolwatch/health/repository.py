"""Repository for the append-only ``health_checks`` table."""

import logging
from datetime import datetime
from typing import Any

from toolwatch.health.schemas import HealthCheckRecord
from toolwatch.storage.database import Database, affected_rows

logger = logging.getLogger(__name__)


class HealthCheckRepository:
    """Append, read back, and expire probe history."""

    def __init__(self, database: Database):
        self._db = database

    async def insert(self, record: HealthCheckRecord) -> None:
        """Append one probe outcome."""
        await self._db.execute(
            """
            INSERT INTO health_checks (
                tool_id, checked_at, is_online, http_status, response_time_ms
            ) VALUES ($1, $2, $3, $4, $5)
            """,
            record.tool_id,
            record.checked_at,
            record.is_online,
            record.http_status,
            record.response_time_ms,
        )

    async def recent_checks(
        self,
        tool_id: int,
        since: datetime | None = None,
        limit: int = 5,
    ) -> list[HealthCheckRecord]:
        """
        Most recent checks for a tool, newest first.

        Args:
            tool_id: Tool to read history for
            since: Only return checks at or after this time
            limit: Maximum rows returned
        """
        if since is None:
            rows = await self._db.fetch(
                """
                SELECT tool_id, checked_at, is_online, http_status, response_time_ms
                FROM health_checks
                WHERE tool_id = $1
                ORDER BY checked_at DESC
                LIMIT $2
                """,
                tool_id,
                limit,
            )
        else:
            rows = await self._db.fetch(
                """
                SELECT tool_id, checked_at, is_online, http_status, response_time_ms
                FROM health_checks
                WHERE tool_id = $1 AND checked_at >= $2
                ORDER BY checked_at DESC
                LIMIT $3
                """,
                tool_id,
                since,
                limit,
            )
        return [_row_to_record(row) for row in rows]

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Delete checks older than ``cutoff``. Returns rows deleted."""
        status = await self._db.execute(
            "DELETE FROM health_checks WHERE checked_at < $1",
            cutoff,
        )
        deleted = affected_rows(status)
        if deleted:
            logger.info("Pruned %d health checks older than %s", deleted, cutoff)
        return deleted


def _row_to_record(row: Any) -> HealthCheckRecord:
    return HealthCheckRecord(
        tool_id=row["tool_id"],
        is_online=row["is_online"],
        checked_at=row["checked_at"],
        http_status=row.get("http_status"),
        response_time_ms=row.get("response_time_ms"),
    )
