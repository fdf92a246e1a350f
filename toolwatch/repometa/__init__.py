"""Cached GitHub repository metadata refresh."""

from toolwatch.repometa.config import RepoRefreshConfig
from toolwatch.repometa.refresher import (
    InvalidRepoUrlError,
    RepoRefreshError,
    RepoRefreshResult,
    refresh_tool,
    run_repo_refresh,
)

__all__ = [
    "InvalidRepoUrlError",
    "RepoRefreshConfig",
    "RepoRefreshError",
    "RepoRefreshResult",
    "refresh_tool",
    "run_repo_refresh",
]
