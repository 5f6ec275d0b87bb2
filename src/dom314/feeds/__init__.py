"""Feed models, caching and group aggregation for dom314."""

from dom314.feeds.aggregator import (
    FailurePolicy,
    FeedFailure,
    GroupAggregator,
    GroupEpisodes,
)
from dom314.feeds.cache import FeedCache
from dom314.feeds.models import Episode, Podcast
from dom314.feeds.ordering import SortOrder, order_episodes, sort_episodes

__all__ = [
    "Episode",
    "Podcast",
    "FeedCache",
    "GroupAggregator",
    "GroupEpisodes",
    "FeedFailure",
    "FailurePolicy",
    "SortOrder",
    "order_episodes",
    "sort_episodes",
]
