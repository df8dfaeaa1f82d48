"""Pytest fixtures for testing."""
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from smartmark.config import Settings, get_settings
from smartmark.models import Bookmark
from smartmark.storage import BookmarkStore


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for relative-age assertions."""
    return datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    return tmp_path / "bookmarks.json"


@pytest.fixture
def store(data_file: Path) -> BookmarkStore:
    return BookmarkStore(data_file)


@pytest.fixture
def make_bookmark():
    """Factory for Bookmark records with sensible defaults."""

    def _make(bookmark_id: int = 1, **overrides) -> Bookmark:
        fields = {
            "id": bookmark_id,
            "title": f"Bookmark {bookmark_id}",
            "url": f"https://www.site{bookmark_id}.com/page",
        }
        fields.update(overrides)
        return Bookmark(**fields)

    return _make


@pytest.fixture
def settings(data_file: Path) -> Settings:
    return Settings(data_file=data_file)


@pytest.fixture
async def client(store: BookmarkStore, settings: Settings) -> AsyncGenerator[AsyncClient]:
    """Create a test client bound to a temporary bookmark store."""
    from smartmark.main import app, get_store

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: settings

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
