"""Storage layer for tool records."""

from toolwatch.storage.database import Database
from toolwatch.storage.repository import ToolRepository
from toolwatch.storage.schemas import RepoMetadata, Tool

__all__ = ["Database", "RepoMetadata", "Tool", "ToolRepository"]
