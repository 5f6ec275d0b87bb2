"""Test doubles and factories shared across the test suite."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import ClassVar

from dom314.feeds.models import Episode, Podcast
from dom314.feeds.ordering import order_episodes
from dom314.plugins.types import DiscoveryBackend, FetchingBackend
from dom314.utils.errors import FetchError

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_episode(
    audio_url: str,
    seconds: int = 0,
    podcast: str = "Test Podcast",
    title: str | None = None,
) -> Episode:
    """Create an episode published `seconds` after BASE_TIME."""
    return Episode(
        podcast=podcast,
        title=title or audio_url.rsplit("/", 1)[-1],
        description="",
        published_at=BASE_TIME + timedelta(seconds=seconds),
        audio_url=audio_url,
    )


class FakeFetchingBackend(FetchingBackend):
    """Fetching backend serving canned episode lists.

    Counts calls per URL; URLs listed in `failing` raise FetchError, and
    `delay` makes every fetch sleep so concurrent callers overlap.
    """

    NAME: ClassVar[str] = "fake"
    VERSION: ClassVar[str] = "1.0.0"
    DESCRIPTION: ClassVar[str] = "Canned feeds for tests"

    def __init__(
        self,
        feeds: dict[str, list[Episode]] | None = None,
        delay: float = 0.0,
    ) -> None:
        super().__init__()
        self.feeds = feeds or {}
        self.delay = delay
        self.failing: set[str] = set()
        self.calls: dict[str, int] = {}

    def call_count(self, feed_url: str) -> int:
        return self.calls.get(feed_url, 0)

    async def fetch_feed(self, feed_url: str) -> list[Episode]:
        self.calls[feed_url] = self.calls.get(feed_url, 0) + 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if feed_url in self.failing or feed_url not in self.feeds:
            raise FetchError(f"cannot fetch {feed_url}", feed_url)
        return order_episodes(self.feeds[feed_url])


class RendezvousFetchingBackend(FakeFetchingBackend):
    """Fetching backend whose fetches only finish once `parties` are in flight.

    Serial fetching never reaches the rendezvous, so each fetch raises
    TimeoutError after `timeout` seconds instead of returning.
    """

    NAME: ClassVar[str] = "rendezvous"

    def __init__(
        self,
        feeds: dict[str, list[Episode]] | None = None,
        parties: int = 2,
        timeout: float = 2.0,
    ) -> None:
        super().__init__(feeds)
        self.parties = parties
        self.timeout = timeout
        self.in_flight = 0
        self.max_in_flight = 0
        self._all_started = asyncio.Event()

    async def fetch_feed(self, feed_url: str) -> list[Episode]:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        if self.in_flight >= self.parties:
            self._all_started.set()
        try:
            await asyncio.wait_for(self._all_started.wait(), self.timeout)
            return await super().fetch_feed(feed_url)
        finally:
            self.in_flight -= 1


class FakeDiscoveryBackend(DiscoveryBackend):
    """Discovery backend with a fixed catalog."""

    NAME: ClassVar[str] = "fake-discovery"
    VERSION: ClassVar[str] = "1.0.0"
    DESCRIPTION: ClassVar[str] = "Fixed catalog for tests"
    LABEL: ClassVar[str] = "Fake catalog"

    def __init__(self, podcasts: list[Podcast] | None = None) -> None:
        super().__init__()
        self.podcasts = podcasts or []

    async def discovery(self) -> list[Podcast]:
        return list(self.podcasts)
