"""Repository for the one-row-per-tool ``github_notifications`` table."""

from typing import Any

from toolwatch.notifications.schemas import GitHubNotification
from toolwatch.storage.database import Database


class NotificationRepository:
    """Read and upsert notification records."""

    def __init__(self, database: Database):
        self._db = database

    async def get(self, tool_id: int) -> GitHubNotification | None:
        row = await self._db.fetchrow(
            """
            SELECT tool_id, issue_url, issue_number, status, error_message, created_at
            FROM github_notifications WHERE tool_id = $1
            """,
            tool_id,
        )
        if row is None:
            return None
        return _row_to_notification(row)

    async def upsert(self, notification: GitHubNotification) -> None:
        """Insert or overwrite the tool's record in one statement."""
        await self._db.execute(
            """
            INSERT INTO github_notifications (
                tool_id, issue_url, issue_number, status, error_message, created_at
            ) VALUES ($1, $2, $3, $4, $5, $6)
            ON CONFLICT (tool_id) DO UPDATE SET
                issue_url = EXCLUDED.issue_url,
                issue_number = EXCLUDED.issue_number,
                status = EXCLUDED.status,
                error_message = EXCLUDED.error_message,
                created_at = EXCLUDED.created_at
            """,
            notification.tool_id,
            notification.issue_url,
            notification.issue_number,
            notification.status,
            notification.error_message,
            notification.created_at,
        )


def _row_to_notification(row: Any) -> GitHubNotification:
    return GitHubNotification(
        tool_id=row["tool_id"],
        issue_url=row.get("issue_url"),
        issue_number=row.get("issue_number"),
        status=row["status"],
        error_message=row.get("error_message"),
        created_at=row["created_at"],
    )
