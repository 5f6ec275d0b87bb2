"""FetchingBackend base class for turning a feed URL into episodes."""

from abc import abstractmethod

from dom314.feeds.models import Episode
from dom314.plugins.base import Dom314Plugin


class FetchingBackend(Dom314Plugin):
    """Base class for backends that fetch a feed's episode list.

    Implementations should raise FetchError (or FetchTimeoutError) on
    network and parse failures, and return their episodes through
    dom314.feeds.ordering.order_episodes. Sync implementations should use
    asyncio.to_thread().
    """

    @abstractmethod
    async def fetch_feed(self, feed_url: str) -> list[Episode]:
        """Fetch all episodes of a feed.

        Args:
            feed_url: URL identifying the feed.

        Returns:
            Episodes sorted by strictly increasing publication time.

        Raises:
            FetchError: If the feed could not be fetched or parsed.
        """
