"""Repo Metadata Refresher: keep cached GitHub stars/forks/license current.

Each cycle picks a bounded number of tools whose repository metadata was
never fetched or has gone stale, never-fetched first, then oldest first.
A tool whose URL does not parse or whose API call fails is skipped and
keeps its old fetch timestamp, so it stays at the front of the queue.

Designed for external cron scheduling: ``0 5 * * * toolwatch repo-refresh``
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from toolwatch.config.settings import get_settings
from toolwatch.github.client import GitHubApiError, GitHubClient
from toolwatch.github.urls import parse_repo_url
from toolwatch.observability.metrics import get_metrics
from toolwatch.observability.tracing import get_tracer, traced
from toolwatch.repometa.config import RepoRefreshConfig
from toolwatch.storage.database import Database
from toolwatch.storage.repository import ToolRepository
from toolwatch.storage.schemas import RepoMetadata

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


class RepoRefreshError(Exception):
    """A single-tool refresh could not be performed."""


class InvalidRepoUrlError(RepoRefreshError):
    """The tool has no repository URL, or it is not a GitHub repository."""


@dataclass
class RepoRefreshResult:
    """Summary of one metadata refresh cycle."""

    trigger_source: str = "cron"
    candidates: int = 0
    updated: list[int] = field(default_factory=list)
    skipped_invalid: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0


def _client(config: RepoRefreshConfig, github_token: str | None) -> GitHubClient:
    return GitHubClient(
        token=github_token,
        timeout=config.timeout_seconds,
        user_agent=config.user_agent,
    )


async def run_repo_refresh(
    database: Database,
    config: RepoRefreshConfig | None = None,
    github_token: str | None = None,
    trigger_source: str = "cron",
) -> RepoRefreshResult:
    """
    Refresh metadata for the most overdue tools.

    Args:
        database: Connected Database instance (caller manages lifecycle).
        config: Refresh configuration (default: from env).
        github_token: Optional token for the higher rate limit (default: from settings).
        trigger_source: "cron" or "manual".

    Returns:
        RepoRefreshResult listing updated, skipped and failed tool ids.
    """
    config = config or RepoRefreshConfig()
    github_token = github_token or get_settings().github_token
    result = RepoRefreshResult(trigger_source=trigger_source)
    start_time = time.monotonic()
    metrics = get_metrics()

    tool_repo = ToolRepository(database)
    client = _client(config, github_token)

    with traced(tracer, "repo_refresh_cycle", {"trigger_source": trigger_source}):
        stale_before = datetime.now(timezone.utc) - timedelta(days=config.staleness_days)
        try:
            tools = await tool_repo.list_repo_refresh_candidates(
                stale_before, config.batch_limit
            )
        except Exception as e:
            logger.exception("Failed to select tools for refresh")
            result.errors.append(f"select: {e}")
            return _finish(result, start_time)

        result.candidates = len(tools)
        logger.info("Repo refresh: %d tools to refresh", len(tools))

        for tool in tools:
            ref = parse_repo_url(tool.repo_url)
            if ref is None:
                logger.warning("Invalid repo URL for tool #%d: %s", tool.id, tool.repo_url)
                result.skipped_invalid.append(tool.id)
                metrics.record_repo_refresh("invalid_url")
                continue

            try:
                metadata = await client.get_repo(ref.owner, ref.repo)
                await tool_repo.update_repo_metadata(
                    tool.id, metadata, datetime.now(timezone.utc)
                )
            except Exception as e:
                logger.error("Repo refresh failed for tool #%d: %s", tool.id, e)
                result.failed.append(tool.id)
                result.errors.append(f"refresh:{tool.id}: {e}")
                metrics.record_repo_refresh("failed")
                continue

            logger.info(
                "Updated tool #%d from %s: stars=%d forks=%d",
                tool.id,
                ref.full_name,
                metadata.stars,
                metadata.forks,
            )
            result.updated.append(tool.id)
            metrics.record_repo_refresh("updated")

    return _finish(result, start_time)


def _finish(result: RepoRefreshResult, start_time: float) -> RepoRefreshResult:
    result.elapsed_seconds = time.monotonic() - start_time
    get_metrics().record_cycle("repo_refresh", result.elapsed_seconds, len(result.errors))
    logger.info(
        "Repo refresh done: updated=%d invalid=%d failed=%d (%.1fs)",
        len(result.updated),
        len(result.skipped_invalid),
        len(result.failed),
        result.elapsed_seconds,
    )
    return result


async def refresh_tool(
    database: Database,
    tool_id: int,
    config: RepoRefreshConfig | None = None,
    github_token: str | None = None,
) -> RepoMetadata | None:
    """
    Refresh one tool's metadata on demand, regardless of staleness.

    Returns:
        The stored metadata, or None if the tool does not exist

    Raises:
        InvalidRepoUrlError: No parseable GitHub repository URL
        GitHubApiError: The repository API call failed
    """
    config = config or RepoRefreshConfig()
    github_token = github_token or get_settings().github_token
    tool_repo = ToolRepository(database)

    tool = await tool_repo.get_by_id(tool_id)
    if tool is None:
        return None

    ref = parse_repo_url(tool.repo_url)
    if ref is None:
        get_metrics().record_repo_refresh("invalid_url")
        raise InvalidRepoUrlError(f"Invalid GitHub repository URL: {tool.repo_url!r}")

    try:
        metadata = await _client(config, github_token).get_repo(ref.owner, ref.repo)
    except GitHubApiError:
        get_metrics().record_repo_refresh("failed")
        raise

    await tool_repo.update_repo_metadata(tool.id, metadata, datetime.now(timezone.utc))
    get_metrics().record_repo_refresh("updated")
    return metadata
