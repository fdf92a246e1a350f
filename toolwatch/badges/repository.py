"""Repository for the one-row-per-tool ``badge_displays`` table."""

import logging
from typing import Any

from toolwatch.badges.schemas import BadgeDisplayRecord
from toolwatch.storage.database import Database

logger = logging.getLogger(__name__)


class BadgeDisplayRepository:
    """Upsert and read badge classifications."""

    def __init__(self, database: Database):
        self._db = database

    async def upsert(self, record: BadgeDisplayRecord) -> None:
        """Insert or overwrite the tool's classification in one statement."""
        await self._db.execute(
            """
            INSERT INTO badge_displays (tool_id, display_type, last_checked_at)
            VALUES ($1, $2, $3)
            ON CONFLICT (tool_id) DO UPDATE SET
                display_type = EXCLUDED.display_type,
                last_checked_at = EXCLUDED.last_checked_at
            """,
            record.tool_id,
            record.display_type,
            record.last_checked_at,
        )

    async def get(self, tool_id: int) -> BadgeDisplayRecord | None:
        row = await self._db.fetchrow(
            """
            SELECT tool_id, display_type, last_checked_at
            FROM badge_displays WHERE tool_id = $1
            """,
            tool_id,
        )
        if row is None:
            return None
        return _row_to_record(row)


def _row_to_record(row: Any) -> BadgeDisplayRecord:
    return BadgeDisplayRecord(
        tool_id=row["tool_id"],
        display_type=row["display_type"],
        last_checked_at=row["last_checked_at"],
    )
