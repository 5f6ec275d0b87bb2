"""In-memory cache of fetched feeds.

One FeedCache is created per application session and handed to every
component that needs episode lists. Entries never expire on their own;
they live until wipe() or invalidate() is called or the cache object is
dropped.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from dom314.feeds.models import Episode
from dom314.feeds.ordering import order_episodes
from dom314.utils.errors import FetchError, FetchTimeoutError

if TYPE_CHECKING:
    from dom314.plugins.registry import BackendRegistry
    from dom314.plugins.types import FetchingBackend

logger = logging.getLogger(__name__)


class FeedCache:
    """Memoizes fetch results keyed by feed URL.

    At most one fetch per feed URL is in flight at any time. Callers asking
    for a URL that is already being fetched await the same task instead of
    starting a second request, while fetches of different URLs run
    independently. Failed fetches are not stored, so the next call retries.

    All methods must be called from the event loop thread.

    Example:
        >>> cache = FeedCache(backends.fetching, timeout=30)
        >>> episodes = await cache.get_or_fetch("rss", "https://example.com/feed.xml")
    """

    def __init__(
        self,
        registry: "BackendRegistry[FetchingBackend]",
        timeout: float | None = None,
    ) -> None:
        """Initialize cache.

        Args:
            registry: Registry used to resolve backend identifiers.
            timeout: Seconds a single fetch may take (None = no limit).
        """
        self.registry = registry
        self.timeout = timeout
        self._entries: dict[str, list[Episode]] = {}
        self._in_flight: dict[str, asyncio.Task[list[Episode]]] = {}

    async def get_or_fetch(self, backend_name: str, feed_url: str) -> list[Episode]:
        """Return the episodes of a feed, fetching them on a cache miss.

        Cancelling the caller does not cancel the shared fetch; other
        callers waiting on the same URL still receive its result.

        Args:
            backend_name: Identifier of the fetching backend for this feed.
            feed_url: Feed URL (the cache key).

        Returns:
            A fresh list of the cached episodes.

        Raises:
            UnknownBackendError: If backend_name is not registered.
            FetchError: If the fetch failed or timed out.
        """
        cached = self._entries.get(feed_url)
        if cached is not None:
            logger.debug(f"Cache hit for {feed_url}")
            return list(cached)

        task = self._in_flight.get(feed_url)
        if task is None:
            backend = self.registry.get(backend_name)
            logger.debug(f"Cache miss for {feed_url}, fetching with '{backend_name}'")
            task = asyncio.ensure_future(self._fetch(backend, feed_url))
            self._in_flight[feed_url] = task
        else:
            logger.debug(f"Joining in-flight fetch of {feed_url}")

        episodes = await asyncio.shield(task)
        return list(episodes)

    async def _fetch(self, backend: "FetchingBackend", feed_url: str) -> list[Episode]:
        """Run one backend fetch and store its result on success."""
        try:
            try:
                episodes = await asyncio.wait_for(backend.fetch_feed(feed_url), self.timeout)
            except asyncio.TimeoutError as e:
                raise FetchTimeoutError(
                    f"Fetching {feed_url} timed out after {self.timeout}s", feed_url
                ) from e
            except FetchError:
                raise
            except Exception as e:
                raise FetchError(
                    f"Backend '{backend.NAME}' failed for {feed_url}: {type(e).__name__}: {e}",
                    feed_url,
                ) from e

            episodes = order_episodes(episodes)
            self._entries[feed_url] = episodes
            logger.debug(f"Cached {len(episodes)} episodes for {feed_url}")
            return episodes
        finally:
            self._in_flight.pop(feed_url, None)

    def wipe(self) -> int:
        """Drop every cached feed.

        Fetches in flight are left running and store their result once done.

        Returns:
            Number of entries removed.
        """
        count = len(self._entries)
        self._entries.clear()
        logger.info(f"Wiped {count} cached feed(s)")
        return count

    def invalidate(self, feed_url: str) -> bool:
        """Drop a single cached feed.

        Returns:
            True if an entry was removed.
        """
        return self._entries.pop(feed_url, None) is not None

    def contains(self, feed_url: str) -> bool:
        """Whether a completed fetch of feed_url is cached."""
        return feed_url in self._entries

    def __len__(self) -> int:
        return len(self._entries)
