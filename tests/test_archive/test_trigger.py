"""Tests for the Wayback client and the Archival Trigger."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx

from toolwatch.archive.client import SAVE_ENDPOINT, WaybackArchiver, snapshot_url
from toolwatch.archive.trigger import ArchivalTrigger
from toolwatch.config.settings import Settings
from toolwatch.storage.repository import ToolRepository

URL = "https://dead.example.com"


class TestWaybackArchiver:
    """Tests for WaybackArchiver.save()."""

    def test_snapshot_url(self):
        assert snapshot_url(URL) == "https://web.archive.org/web/https://dead.example.com"

    @pytest.mark.asyncio
    @respx.mock
    async def test_save_success(self):
        route = respx.post(SAVE_ENDPOINT).mock(return_value=httpx.Response(200, json={}))

        result = await WaybackArchiver("ak", "sk").save(URL)

        assert result == snapshot_url(URL)
        request = route.calls.last.request
        assert request.headers["Authorization"] == "LOW ak:sk"
        body = request.content.decode()
        assert "capture_all=1" in body
        assert "url=https%3A%2F%2Fdead.example.com" in body

    @pytest.mark.asyncio
    @respx.mock
    async def test_save_failure_returns_none_without_retry(self):
        route = respx.post(SAVE_ENDPOINT).mock(return_value=httpx.Response(503))

        assert await WaybackArchiver("ak", "sk").save(URL) is None
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_save_network_error_returns_none(self):
        respx.post(SAVE_ENDPOINT).mock(side_effect=httpx.ConnectError("refused"))

        assert await WaybackArchiver("ak", "sk").save(URL) is None


class FakeToolStore:
    """In-memory archive_url column with write-once semantics."""

    def __init__(self):
        self.archive_urls: dict[int, str | None] = {}

    async def set_archive_url(self, tool_id, archive_url):
        if self.archive_urls.get(tool_id) is not None:
            return False
        self.archive_urls[tool_id] = archive_url
        return True


class TestArchivalTrigger:
    """Tests for ArchivalTrigger.archive()."""

    @pytest.mark.asyncio
    async def test_sets_archive_url(self):
        store = FakeToolStore()
        archiver = MagicMock()
        archiver.save = AsyncMock(return_value=snapshot_url(URL))

        result = await ArchivalTrigger(store, archiver).archive(5, URL)

        assert result == snapshot_url(URL)
        assert store.archive_urls[5] == snapshot_url(URL)

    @pytest.mark.asyncio
    async def test_write_once(self):
        store = FakeToolStore()
        archiver = MagicMock()
        archiver.save = AsyncMock(side_effect=["first", "second"])
        trigger = ArchivalTrigger(store, archiver)

        assert await trigger.archive(5, URL) == "first"
        assert await trigger.archive(5, URL) is None
        assert store.archive_urls[5] == "first"

    @pytest.mark.asyncio
    async def test_failed_submission_leaves_field_unset(self):
        store = FakeToolStore()
        archiver = MagicMock()
        archiver.save = AsyncMock(return_value=None)

        assert await ArchivalTrigger(store, archiver).archive(5, URL) is None
        assert store.archive_urls.get(5) is None

    @pytest.mark.asyncio
    async def test_exceptions_are_swallowed(self):
        store = MagicMock()
        store.set_archive_url = AsyncMock(side_effect=RuntimeError("db down"))
        archiver = MagicMock()
        archiver.save = AsyncMock(return_value="snap")

        assert await ArchivalTrigger(store, archiver).archive(5, URL) is None

    @pytest.mark.asyncio
    async def test_real_repository_uses_null_guard(self, mock_db):
        mock_db.execute.return_value = "UPDATE 0"
        archiver = MagicMock()
        archiver.save = AsyncMock(return_value="snap")

        result = await ArchivalTrigger(ToolRepository(mock_db), archiver).archive(5, URL)

        assert result is None
        sql = mock_db.execute.await_args.args[0]
        assert "archive_url IS NULL" in sql

    def test_from_settings_requires_both_keys(self):
        repo = MagicMock()
        assert ArchivalTrigger.from_settings(
            Settings(archive_org_access_key="a", archive_org_secret_key=None), repo
        ) is None
        trigger = ArchivalTrigger.from_settings(
            Settings(archive_org_access_key="a", archive_org_secret_key="b"), repo
        )
        assert isinstance(trigger, ArchivalTrigger)
