"""Concurrent fetching and merging of a group's feeds."""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from dom314.feeds.models import Episode, Podcast
from dom314.feeds.ordering import SortOrder, sort_episodes
from dom314.utils.errors import AggregationError, Dom314Error

if TYPE_CHECKING:
    from dom314.feeds.cache import FeedCache
    from dom314.state.store import Group, StateStore

logger = logging.getLogger(__name__)

# Maximum concurrent feed fetches to prevent connection exhaustion
MAX_CONCURRENT_FEEDS = 10


class FailurePolicy(str, Enum):
    """What a group view does when some of its feeds fail."""

    STRICT = "strict"  # Raise AggregationError if any feed failed
    PARTIAL = "partial"  # Return what succeeded together with the failures


@dataclass
class FeedFailure:
    """A feed of a group that could not be fetched."""

    feed_url: str
    backend: str
    error: Dom314Error

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass
class GroupEpisodes:
    """Merged episodes of a group plus any feeds that failed."""

    group: str
    episodes: list[Episode]
    feed_count: int
    failures: list[FeedFailure] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """Whether every subscribed feed was fetched."""
        return not self.failures


class GroupAggregator:
    """Fetches all feeds of a subscription group through the feed cache.

    Example:
        >>> aggregator = GroupAggregator(store, cache)
        >>> result = await aggregator.episodes_for_group("beloved")
        >>> latest = result.episodes[0]
    """

    def __init__(
        self,
        store: "StateStore",
        cache: "FeedCache",
        max_concurrency: int = MAX_CONCURRENT_FEEDS,
        policy: FailurePolicy = FailurePolicy.STRICT,
    ) -> None:
        """Initialize the aggregator.

        Args:
            store: State store holding the group subscriptions.
            cache: Feed cache used for every fetch.
            max_concurrency: Upper bound on simultaneous fetches.
            policy: Default failure policy for group views.
        """
        self.store = store
        self.cache = cache
        self.max_concurrency = max_concurrency
        self.policy = policy

    async def episodes_for_group(
        self,
        group: "str | Group",
        order: SortOrder = SortOrder.NEWEST_FIRST,
        policy: FailurePolicy | None = None,
    ) -> GroupEpisodes:
        """Fetch and merge the episodes of every feed in a group.

        The subscription list is read once; feeds are then fetched
        concurrently through the cache.

        Args:
            group: Subscription group name.
            order: Direction of the chronological sort.
            policy: Failure policy (defaults to the aggregator's policy).

        Returns:
            Merged, sorted episodes and the list of failed feeds.

        Raises:
            AggregationError: If a feed failed under FailurePolicy.STRICT.
            StorageError: If the subscriptions could not be read.
            UnknownGroupError: If the group does not exist.
        """
        policy = policy or self.policy
        group_name = getattr(group, "value", group)
        subscriptions = await asyncio.to_thread(self.store.list_subscriptions, group)

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def fetch_with_limit(
            feed_url: str, backend: str
        ) -> list[Episode] | FeedFailure:
            async with semaphore:
                try:
                    return await self.cache.get_or_fetch(backend, feed_url)
                except Dom314Error as e:
                    logger.debug(f"Feed {feed_url} ({backend}) failed: {e}")
                    return FeedFailure(feed_url=feed_url, backend=backend, error=e)

        results = await asyncio.gather(
            *[fetch_with_limit(feed_url, backend) for feed_url, backend in subscriptions]
        )

        episodes: list[Episode] = []
        failures: list[FeedFailure] = []
        for result in results:
            if isinstance(result, FeedFailure):
                failures.append(result)
            else:
                episodes.extend(result)

        if failures:
            if policy == FailurePolicy.STRICT:
                raise AggregationError(group_name, failures)
            logger.warning(
                f"{len(failures)} of {len(subscriptions)} feed(s) in '{group_name}' "
                "could not be fetched; showing partial results"
            )

        return GroupEpisodes(
            group=group_name,
            episodes=sort_episodes(episodes, order),
            feed_count=len(subscriptions),
            failures=failures,
        )

    async def episodes_for_podcast(
        self,
        podcast: Podcast,
        order: SortOrder = SortOrder.OLDEST_FIRST,
    ) -> list[Episode]:
        """Fetch the episodes of a single podcast through the cache.

        Raises:
            FetchError: If the feed could not be fetched.
            UnknownBackendError: If the podcast's backend is not registered.
        """
        episodes = await self.cache.get_or_fetch(podcast.backend, podcast.feed_url)
        return sort_episodes(episodes, order)
