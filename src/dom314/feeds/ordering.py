"""Chronological ordering of episode lists."""

from datetime import timedelta
from enum import Enum

from dom314.feeds.models import Episode

# Smallest step datetime can represent; used to separate equal timestamps
TIE_BREAK_STEP = timedelta(microseconds=1)


class SortOrder(str, Enum):
    """Direction in which episode lists are presented."""

    NEWEST_FIRST = "newest"
    OLDEST_FIRST = "oldest"


def order_episodes(episodes: list[Episode]) -> list[Episode]:
    """Sort episodes oldest first so that no two compare equal.

    Episodes sharing a timestamp keep their encounter order and are pushed
    forward by one microsecond each, which keeps the ordering total when the
    lists of several feeds are merged later on.

    Args:
        episodes: Episodes in feed order.

    Returns:
        New list sorted by strictly increasing published_at.
    """
    ordered: list[Episode] = []
    previous = None
    for episode in sorted(episodes, key=lambda ep: ep.published_at):
        if previous is not None and episode.published_at <= previous:
            episode = episode.model_copy(
                update={"published_at": previous + TIE_BREAK_STEP}
            )
        ordered.append(episode)
        previous = episode.published_at
    return ordered


def sort_episodes(episodes: list[Episode], order: SortOrder) -> list[Episode]:
    """Return episodes sorted by publication time in the given direction."""
    return sorted(
        episodes,
        key=lambda ep: ep.published_at,
        reverse=order == SortOrder.NEWEST_FIRST,
    )
