"""Repository for the ``data_exports`` audit log."""

import logging
from typing import Any

from toolwatch.export.schemas import ExportAttempt
from toolwatch.storage.database import Database

logger = logging.getLogger(__name__)


class ExportRepository:
    """Append and list export attempts."""

    def __init__(self, database: Database):
        self._db = database

    async def record(self, attempt: ExportAttempt) -> int:
        """Append an attempt. Returns its id."""
        return await self._db.fetchval(
            """
            INSERT INTO data_exports (
                exported_at, tool_count, files_updated,
                trigger_source, status, error_message
            ) VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING id
            """,
            attempt.exported_at,
            attempt.tool_count,
            list(attempt.files_updated),
            attempt.trigger_source,
            attempt.status,
            attempt.error_message,
        )

    async def list_recent(self, limit: int = 20) -> list[ExportAttempt]:
        """Most recent attempts first."""
        rows = await self._db.fetch(
            """
            SELECT id, exported_at, tool_count, files_updated,
                   trigger_source, status, error_message
            FROM data_exports
            ORDER BY exported_at DESC, id DESC
            LIMIT $1
            """,
            limit,
        )
        return [_row_to_attempt(row) for row in rows]


def _row_to_attempt(row: Any) -> ExportAttempt:
    return ExportAttempt(
        id=row["id"],
        exported_at=row["exported_at"],
        tool_count=row["tool_count"],
        files_updated=list(row.get("files_updated") or []),
        trigger_source=row["trigger_source"],
        status=row["status"],
        error_message=row.get("error_message"),
    )
