"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before anything imports the settings module,
so the global settings never point at a real database file.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Any, Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from story_api.adapters.storage.sqlalchemy_store import SqlAlchemyStoryStore
from story_api.core.app_factory import create_app
from story_api.core.config import AppSettings, LogSettings, Settings


@pytest.fixture
def database_url(tmp_path) -> str:
    """SQLite file isolated per test."""
    return f"sqlite:///{tmp_path / 'stories.db'}"


@pytest.fixture
def make_settings(database_url: str) -> Callable[..., Settings]:
    """Build Settings for a test app, overriding AppSettings fields."""

    def _make(**app_overrides: Any) -> Settings:
        app_settings = AppSettings(database_url=database_url, **app_overrides)
        return Settings(app=app_settings, log=LogSettings(level="WARNING"))

    return _make


@pytest.fixture
def app(make_settings: Callable[..., Settings]) -> FastAPI:
    return create_app(make_settings())


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def store(database_url: str) -> SqlAlchemyStoryStore:
    story_store = SqlAlchemyStoryStore(database_url)
    story_store.init_schema()
    yield story_store
    story_store.dispose()


@pytest.fixture
def submit(client: TestClient) -> Callable[..., Any]:
    """POST a story with age confirmed unless overridden."""

    def _submit(text: str | None = "A story", **fields: Any):
        body: dict[str, Any] = {"ageConfirmed": True, **fields}
        if text is not None:
            body["text"] = text
        return client.post("/api/stories", json=body)

    return _submit
