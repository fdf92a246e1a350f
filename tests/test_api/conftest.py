"""Shared fixtures for API tests."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from toolwatch.api.app import create_app
from toolwatch.api.auth import verify_api_key
from toolwatch.api.dependencies import get_background_tasks, get_database
from toolwatch.services.background import BackgroundTaskGroup


@pytest.fixture
def api_db():
    """Mock Database for route dependencies."""
    db = AsyncMock()
    db.health_check = AsyncMock(return_value=True)
    return db


@pytest.fixture
def background():
    return BackgroundTaskGroup()


@pytest.fixture
def app(api_db, background):
    app = create_app()
    app.dependency_overrides[verify_api_key] = lambda: "test-key"
    app.dependency_overrides[get_database] = lambda: api_db
    app.dependency_overrides[get_background_tasks] = lambda: background
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client
