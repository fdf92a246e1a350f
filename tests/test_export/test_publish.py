"""Tests for the fetch-compare-write publish helper."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from toolwatch.export.publish import publish_file, publish_if_changed
from toolwatch.github.client import GitHubApiError, RemoteFile


class TestPublishIfChanged:

    @pytest.mark.asyncio
    async def test_identical_content_skips_write(self):
        read = AsyncMock(return_value=("same", "rev1"))
        write = AsyncMock()

        assert await publish_if_changed(read, write, "same") is False
        write.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_changed_content_writes_with_revision(self):
        read = AsyncMock(return_value=("old", "rev1"))
        write = AsyncMock()

        assert await publish_if_changed(read, write, "new") is True
        write.assert_awaited_once_with("new", "rev1")

    @pytest.mark.asyncio
    async def test_absent_target_is_created(self):
        read = AsyncMock(return_value=None)
        write = AsyncMock()

        assert await publish_if_changed(read, write, "new") is True
        write.assert_awaited_once_with("new", None)

    @pytest.mark.asyncio
    async def test_undecodable_current_content_is_rewritten(self):
        read = AsyncMock(return_value=(None, "rev1"))
        write = AsyncMock()

        assert await publish_if_changed(read, write, "new") is True
        write.assert_awaited_once_with("new", "rev1")

    @pytest.mark.asyncio
    async def test_byte_level_comparison(self):
        read = AsyncMock(return_value=("line\n", "rev1"))
        write = AsyncMock()

        assert await publish_if_changed(read, write, "line") is True

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self):
        read = AsyncMock(return_value=("old", "rev1"))
        write = AsyncMock(side_effect=GitHubApiError("conflict", status=409))

        with pytest.raises(GitHubApiError):
            await publish_if_changed(read, write, "new")


class TestPublishFile:

    @pytest.mark.asyncio
    async def test_uses_remote_sha(self):
        client = MagicMock()
        client.get_file = AsyncMock(return_value=RemoteFile(sha="abc", content="old"))
        client.put_file = AsyncMock()
        committer = {"name": "bot", "email": "bot@example.com"}

        assert await publish_file(client, "o/r", "tools.json", "new", committer) is True

        client.put_file.assert_awaited_once_with(
            "o/r",
            "tools.json",
            "new",
            sha="abc",
            message="Update tools.json",
            committer=committer,
        )

    @pytest.mark.asyncio
    async def test_unchanged(self):
        client = MagicMock()
        client.get_file = AsyncMock(return_value=RemoteFile(sha="abc", content="same"))
        client.put_file = AsyncMock()

        assert await publish_file(client, "o/r", "tools.json", "same") is False
        client.put_file.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_file_created_without_sha(self):
        client = MagicMock()
        client.get_file = AsyncMock(return_value=None)
        client.put_file = AsyncMock()

        assert await publish_file(client, "o/r", "README.md", "# list") is True
        assert client.put_file.await_args.kwargs["sha"] is None
