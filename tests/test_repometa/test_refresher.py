"""Tests for the Repo Metadata Refresher."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from toolwatch.github.client import GitHubApiError
from toolwatch.repometa.config import RepoRefreshConfig
from toolwatch.repometa.refresher import InvalidRepoUrlError, refresh_tool, run_repo_refresh
from toolwatch.storage.repository import ToolRepository
from toolwatch.storage.schemas import RepoMetadata
from tests.conftest import make_tool

METADATA = RepoMetadata(stars=50, forks=5, license="MIT", language="Go", updated_at=None)


def _github(side_effect=None):
    client = MagicMock()
    client.get_repo = AsyncMock(return_value=METADATA, side_effect=side_effect)
    return client


def _tool_repo(candidates=None, tool=None):
    repo = MagicMock()
    repo.list_repo_refresh_candidates = AsyncMock(return_value=candidates or [])
    repo.get_by_id = AsyncMock(return_value=tool)
    repo.update_repo_metadata = AsyncMock()
    return repo


class TestRunRepoRefresh:

    @pytest.mark.asyncio
    async def test_updates_valid_and_skips_invalid(self):
        tools = [
            make_tool(1, repo_url="https://github.com/a/one"),
            make_tool(2, repo_url="https://gitlab.com/b/two"),
            make_tool(3, repo_url="https://github.com/c/three.git"),
        ]
        tool_repo = _tool_repo(tools)
        github = _github()

        with (
            patch("toolwatch.repometa.refresher.ToolRepository", return_value=tool_repo),
            patch("toolwatch.repometa.refresher.GitHubClient", return_value=github),
        ):
            result = await run_repo_refresh(AsyncMock(), RepoRefreshConfig(), github_token="t")

        assert result.candidates == 3
        assert result.updated == [1, 3]
        assert result.skipped_invalid == [2]
        assert result.failed == []
        assert [c.args for c in github.get_repo.await_args_list] == [("a", "one"), ("c", "three")]
        updated_ids = [c.args[0] for c in tool_repo.update_repo_metadata.await_args_list]
        assert updated_ids == [1, 3]
        assert tool_repo.update_repo_metadata.await_args.args[1] == METADATA

    @pytest.mark.asyncio
    async def test_api_failure_does_not_touch_fetch_timestamp(self):
        tools = [
            make_tool(1, repo_url="https://github.com/a/gone"),
            make_tool(2, repo_url="https://github.com/b/ok"),
        ]
        tool_repo = _tool_repo(tools)
        github = _github(side_effect=[GitHubApiError("GitHub API 404: Not Found", status=404), METADATA])

        with (
            patch("toolwatch.repometa.refresher.ToolRepository", return_value=tool_repo),
            patch("toolwatch.repometa.refresher.GitHubClient", return_value=github),
        ):
            result = await run_repo_refresh(AsyncMock(), RepoRefreshConfig(), github_token="t")

        assert result.failed == [1]
        assert result.updated == [2]
        assert tool_repo.update_repo_metadata.await_count == 1
        assert tool_repo.update_repo_metadata.await_args.args[0] == 2
        assert result.errors[0].startswith("refresh:1")

    @pytest.mark.asyncio
    async def test_selection_uses_staleness_and_limit(self):
        tool_repo = _tool_repo([])
        config = RepoRefreshConfig(batch_limit=4, staleness_days=7)

        before = datetime.now(timezone.utc)
        with (
            patch("toolwatch.repometa.refresher.ToolRepository", return_value=tool_repo),
            patch("toolwatch.repometa.refresher.GitHubClient", return_value=_github()),
        ):
            result = await run_repo_refresh(AsyncMock(), config, github_token="t")

        stale_before, limit = tool_repo.list_repo_refresh_candidates.await_args.args
        assert limit == 4
        assert abs((stale_before - (before - timedelta(days=7))).total_seconds()) < 5
        assert result.candidates == 0

    @pytest.mark.asyncio
    async def test_selection_failure(self):
        tool_repo = _tool_repo()
        tool_repo.list_repo_refresh_candidates.side_effect = RuntimeError("db down")

        with (
            patch("toolwatch.repometa.refresher.ToolRepository", return_value=tool_repo),
            patch("toolwatch.repometa.refresher.GitHubClient", return_value=_github()),
        ):
            result = await run_repo_refresh(AsyncMock(), RepoRefreshConfig(), github_token="t")

        assert result.errors == ["select: db down"]


class TestCandidateQuery:

    @pytest.mark.asyncio
    async def test_never_fetched_first_then_oldest(self, mock_db):
        stale_before = datetime(2026, 3, 1, tzinfo=timezone.utc)

        await ToolRepository(mock_db).list_repo_refresh_candidates(stale_before, 10)

        sql, *params = mock_db.fetch.await_args.args
        assert "github_fetched_at IS NULL OR github_fetched_at < $1" in sql
        assert "ORDER BY github_fetched_at IS NULL DESC, github_fetched_at ASC" in sql
        assert params == [stale_before, 10]


class TestRefreshTool:

    @pytest.mark.asyncio
    async def test_refreshes_single_tool(self):
        tool_repo = _tool_repo(tool=make_tool(5, repo_url="https://github.com/o/r"))

        with (
            patch("toolwatch.repometa.refresher.ToolRepository", return_value=tool_repo),
            patch("toolwatch.repometa.refresher.GitHubClient", return_value=_github()),
        ):
            metadata = await refresh_tool(AsyncMock(), 5, github_token="t")

        assert metadata == METADATA
        assert tool_repo.update_repo_metadata.await_args.args[0] == 5

    @pytest.mark.asyncio
    async def test_missing_tool(self):
        with patch("toolwatch.repometa.refresher.ToolRepository", return_value=_tool_repo()):
            assert await refresh_tool(AsyncMock(), 5, github_token="t") is None

    @pytest.mark.asyncio
    async def test_invalid_url_raises(self):
        tool_repo = _tool_repo(tool=make_tool(5, repo_url=None))

        with patch("toolwatch.repometa.refresher.ToolRepository", return_value=tool_repo):
            with pytest.raises(InvalidRepoUrlError):
                await refresh_tool(AsyncMock(), 5, github_token="t")

        tool_repo.update_repo_metadata.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_api_failure_raises(self):
        tool_repo = _tool_repo(tool=make_tool(5, repo_url="https://github.com/o/r"))
        github = _github(side_effect=GitHubApiError("GitHub API 403: limit", status=403))

        with (
            patch("toolwatch.repometa.refresher.ToolRepository", return_value=tool_repo),
            patch("toolwatch.repometa.refresher.GitHubClient", return_value=github),
        ):
            with pytest.raises(GitHubApiError):
                await refresh_tool(AsyncMock(), 5, github_token="t")

        tool_repo.update_repo_metadata.assert_not_awaited()
