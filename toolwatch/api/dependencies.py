"""
Dependency injection for FastAPI endpoints.
"""

from toolwatch.services.background import BackgroundTaskGroup
from toolwatch.services.config import SchedulerConfig
from toolwatch.storage.database import Database

# Global instances (initialized on first request)
_database: Database | None = None
_background: BackgroundTaskGroup | None = None


async def get_database() -> Database:
    """Get the shared, connected Database."""
    global _database

    if _database is None:
        database = Database()
        await database.connect()
        _database = database

    return _database


def get_background_tasks() -> BackgroundTaskGroup:
    """
    Get the application-wide background task group.

    Detached work spawned while serving a request (archival) outlives the
    request and is drained on shutdown.
    """
    global _background

    if _background is None:
        _background = BackgroundTaskGroup()

    return _background


async def cleanup_dependencies() -> None:
    """Drain background work, then close the database."""
    global _database, _background

    if _background is not None:
        await _background.drain(timeout=SchedulerConfig().drain_timeout_seconds)
        _background = None

    if _database is not None:
        await _database.close()
        _database = None
