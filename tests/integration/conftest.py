"""Fixtures for CLI integration tests."""

import os
from pathlib import Path

import pytest
from helpers import FakeDiscoveryBackend, FakeFetchingBackend
from rich.console import Console

from dom314.feeds.models import Podcast
from dom314.state.store import StateStore

# Disable Rich formatting in tests for consistent output across environments
os.environ["NO_COLOR"] = "1"
os.environ["TERM"] = "dumb"


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path, monkeypatch) -> Path:
    """Point config and data directories at a temporary location."""
    monkeypatch.setenv("DOM314_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("DOM314_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("DISPLAY", raising=False)
    monkeypatch.delenv("WAYLAND_DISPLAY", raising=False)
    return tmp_path


@pytest.fixture(autouse=True)
def wide_console(monkeypatch) -> None:
    """Render tables wide enough that titles are never wrapped."""
    monkeypatch.setattr(
        "dom314.cli.console", Console(width=200, color_system=None, highlight=False)
    )


@pytest.fixture
def cli_store(isolated_dirs: Path) -> StateStore:
    """Store on the same database file the CLI uses."""
    return StateStore(db_path=isolated_dirs / "data" / "database.sqlite3")


@pytest.fixture
def cli_backends(monkeypatch) -> tuple[FakeFetchingBackend, FakeDiscoveryBackend]:
    """Replace the built-in backends with fakes for every CLI session."""
    fetching = FakeFetchingBackend()
    discovery = FakeDiscoveryBackend(
        [
            Podcast(
                backend="fake",
                feed_url="https://abc.example.com/feed.xml",
                title="abcdef",
                description="Weekly show",
            ),
            Podcast(
                backend="fake",
                feed_url="https://xyz.example.com/feed.xml",
                title="xyz",
                description="Daily show",
            ),
        ]
    )
    monkeypatch.setattr(
        "dom314.plugins.loader.builtin_backends", lambda: [fetching, discovery]
    )
    return fetching, discovery
