"""
Tool repository for the reads and narrow writes the reconciliation jobs need.

Also owns the schema DDL for every table the jobs touch, so a fresh
database can be brought up with ``toolwatch init-db``.
"""

import logging
from datetime import datetime
from typing import Any

from toolwatch.storage.database import Database, affected_rows
from toolwatch.storage.schemas import RepoMetadata, Tool

logger = logging.getLogger(__name__)


class ToolRepository:
    """
    Repository for ``tools`` and ``tags``.

    Writes are limited to:
    - ``archive_url`` (write-once, enforced in the UPDATE predicate)
    - cached GitHub repository metadata (overwrite)
    """

    def __init__(self, database: Database):
        self._db = database

    async def create_tables(self) -> None:
        """Create database tables if they don't exist."""
        create_sql = """
        CREATE TABLE IF NOT EXISTS tools (
            id                SERIAL PRIMARY KEY,
            slug              TEXT NOT NULL UNIQUE,
            name              TEXT NOT NULL,
            url               TEXT NOT NULL,
            description       TEXT,
            core_task         TEXT NOT NULL DEFAULT '',
            status            TEXT NOT NULL DEFAULT 'pending'
                CHECK (status IN ('pending', 'approved', 'rejected')),
            submitted_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            approved_at       TIMESTAMPTZ,
            archive_url       TEXT,
            is_featured       BOOLEAN NOT NULL DEFAULT FALSE,
            repo_url          TEXT,
            github_stars      INTEGER,
            github_forks      INTEGER,
            github_license    TEXT,
            github_language   TEXT,
            github_updated_at TIMESTAMPTZ,
            github_fetched_at TIMESTAMPTZ
        );

        CREATE INDEX IF NOT EXISTS idx_tools_status ON tools(status);

        CREATE TABLE IF NOT EXISTS tags (
            id        SERIAL PRIMARY KEY,
            tool_id   INTEGER NOT NULL REFERENCES tools(id) ON DELETE CASCADE,
            tag_key   TEXT NOT NULL,
            tag_value TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_tags_tool_id ON tags(tool_id);

        -- Append-only probe history
        CREATE TABLE IF NOT EXISTS health_checks (
            id               BIGSERIAL PRIMARY KEY,
            tool_id          INTEGER NOT NULL REFERENCES tools(id) ON DELETE CASCADE,
            checked_at       TIMESTAMPTZ NOT NULL,
            is_online        BOOLEAN NOT NULL,
            http_status      INTEGER,
            response_time_ms INTEGER
        );

        CREATE INDEX IF NOT EXISTS idx_health_checks_tool_id_checked_at
            ON health_checks(tool_id, checked_at DESC);
        CREATE INDEX IF NOT EXISTS idx_health_checks_checked_at
            ON health_checks(checked_at);

        -- One row per tool, overwritten each detection cycle
        CREATE TABLE IF NOT EXISTS badge_displays (
            id              SERIAL PRIMARY KEY,
            tool_id         INTEGER NOT NULL UNIQUE REFERENCES tools(id) ON DELETE CASCADE,
            display_type    TEXT NOT NULL DEFAULT 'none'
                CHECK (display_type IN ('explicit', 'implicit', 'none')),
            last_checked_at TIMESTAMPTZ
        );

        -- Audit log of catalog export attempts
        CREATE TABLE IF NOT EXISTS data_exports (
            id             SERIAL PRIMARY KEY,
            exported_at    TIMESTAMPTZ NOT NULL,
            tool_count     INTEGER NOT NULL,
            files_updated  TEXT[] NOT NULL DEFAULT '{}',
            trigger_source TEXT NOT NULL CHECK (trigger_source IN ('manual', 'cron')),
            status         TEXT NOT NULL CHECK (status IN ('success', 'error')),
            error_message  TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_data_exports_exported_at
            ON data_exports(exported_at DESC);

        -- Idempotency record for notification issues
        CREATE TABLE IF NOT EXISTS github_notifications (
            id            SERIAL PRIMARY KEY,
            tool_id       INTEGER NOT NULL UNIQUE REFERENCES tools(id) ON DELETE CASCADE,
            issue_url     TEXT,
            issue_number  INTEGER,
            status        TEXT NOT NULL DEFAULT 'created'
                CHECK (status IN ('created', 'error')),
            error_message TEXT,
            created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
        """
        await self._db.execute(create_sql)
        logger.info("Database tables created/verified")

    async def get_by_id(self, tool_id: int) -> Tool | None:
        """Get a single tool by primary key."""
        row = await self._db.fetchrow("SELECT * FROM tools WHERE id = $1", tool_id)
        if row is None:
            return None
        return _row_to_tool(row)

    async def sample_approved(self, limit: int) -> list[Tool]:
        """Pick up to ``limit`` approved tools uniformly at random."""
        rows = await self._db.fetch(
            "SELECT * FROM tools WHERE status = 'approved' ORDER BY RANDOM() LIMIT $1",
            limit,
        )
        return [_row_to_tool(row) for row in rows]

    async def list_approved(self) -> list[Tool]:
        """All approved tools, without tags."""
        rows = await self._db.fetch(
            "SELECT * FROM tools WHERE status = 'approved' ORDER BY id"
        )
        return [_row_to_tool(row) for row in rows]

    async def list_approved_with_tags(self) -> list[Tool]:
        """All approved tools ordered by name, with their tags attached."""
        tool_rows = await self._db.fetch(
            "SELECT * FROM tools WHERE status = 'approved' ORDER BY name ASC, id ASC"
        )
        tag_rows = await self._db.fetch(
            """
            SELECT t.tool_id, t.tag_key, t.tag_value
            FROM tags t
            INNER JOIN tools ON tools.id = t.tool_id
            WHERE tools.status = 'approved'
            ORDER BY t.id
            """
        )

        tag_map: dict[int, list[tuple[str, str]]] = {}
        for row in tag_rows:
            tag_map.setdefault(row["tool_id"], []).append(
                (row["tag_key"], row["tag_value"])
            )

        tools = []
        for row in tool_rows:
            tool = _row_to_tool(row)
            tool.tags = tag_map.get(tool.id, [])
            tools.append(tool)
        return tools

    async def set_archive_url(self, tool_id: int, archive_url: str) -> bool:
        """Set ``archive_url`` only if it is still NULL.

        Returns:
            True if this call wrote the value, False if it was already set.
        """
        status = await self._db.execute(
            "UPDATE tools SET archive_url = $1 WHERE id = $2 AND archive_url IS NULL",
            archive_url,
            tool_id,
        )
        return affected_rows(status) > 0

    async def list_repo_refresh_candidates(
        self,
        stale_before: datetime,
        limit: int,
    ) -> list[Tool]:
        """Tools whose repository metadata is missing or stale.

        Never-fetched tools come first, then the oldest fetches.
        """
        rows = await self._db.fetch(
            """
            SELECT * FROM tools
            WHERE status IN ('approved', 'pending')
              AND repo_url IS NOT NULL
              AND repo_url != ''
              AND (github_fetched_at IS NULL OR github_fetched_at < $1)
            ORDER BY github_fetched_at IS NULL DESC, github_fetched_at ASC
            LIMIT $2
            """,
            stale_before,
            limit,
        )
        return [_row_to_tool(row) for row in rows]

    async def update_repo_metadata(
        self,
        tool_id: int,
        metadata: RepoMetadata,
        fetched_at: datetime,
    ) -> None:
        """Overwrite cached repository metadata for a tool."""
        await self._db.execute(
            """
            UPDATE tools SET
                github_stars = $1,
                github_forks = $2,
                github_license = $3,
                github_language = $4,
                github_updated_at = $5,
                github_fetched_at = $6
            WHERE id = $7
            """,
            metadata.stars,
            metadata.forks,
            metadata.license,
            metadata.language,
            metadata.updated_at,
            fetched_at,
            tool_id,
        )


def _row_to_tool(row: Any) -> Tool:
    """Convert an asyncpg Record to a Tool."""
    return Tool(
        id=row["id"],
        slug=row["slug"],
        name=row["name"],
        url=row["url"],
        status=row["status"],
        description=row.get("description"),
        core_task=row.get("core_task") or "",
        archive_url=row.get("archive_url"),
        is_featured=bool(row.get("is_featured")),
        repo_url=row.get("repo_url"),
        github_stars=row.get("github_stars"),
        github_forks=row.get("github_forks"),
        github_license=row.get("github_license"),
        github_language=row.get("github_language"),
        github_fetched_at=row.get("github_fetched_at"),
    )
