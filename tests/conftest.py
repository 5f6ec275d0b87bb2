"""Shared fixtures for dom314 tests."""

from pathlib import Path

import pytest
from helpers import FakeFetchingBackend

from dom314.feeds.cache import FeedCache
from dom314.plugins.registry import BackendRegistry
from dom314.plugins.types import FetchingBackend
from dom314.state.store import StateStore
from dom314.utils.retry import TEST_RETRY_CONFIG


@pytest.fixture(autouse=True)
def fast_retry_config(monkeypatch):
    """Use fast retry configuration for all tests to avoid long delays."""
    monkeypatch.setattr("dom314.utils.retry.DEFAULT_RETRY_CONFIG", TEST_RETRY_CONFIG)


@pytest.fixture
def store(tmp_path: Path) -> StateStore:
    """State store in a temporary directory."""
    return StateStore(db_path=tmp_path / "state" / "database.sqlite3")


@pytest.fixture
def fake_backend() -> FakeFetchingBackend:
    return FakeFetchingBackend()


@pytest.fixture
def fetching_registry(fake_backend: FakeFetchingBackend) -> BackendRegistry[FetchingBackend]:
    registry: BackendRegistry[FetchingBackend] = BackendRegistry(FetchingBackend)
    registry.register("fake", fake_backend, priority=100, source="test:fake")
    return registry


@pytest.fixture
def cache(fetching_registry: BackendRegistry[FetchingBackend]) -> FeedCache:
    return FeedCache(fetching_registry)
