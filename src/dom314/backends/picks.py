"""Curated list of recommended podcasts."""

from typing import ClassVar

from dom314.feeds.models import Podcast
from dom314.plugins.types import DiscoveryBackend

PICKS = [
    Podcast(
        backend="rss",
        feed_url="https://2pady.pl/feed/podcast",
        title="2pady.pl",
        description=(
            "Między indie a mainstreamem, casualem a hardcorem, rozrywką a tworzeniem"
            " - o grach, z wyobraźnią. Współtworzony przez pasjonatów na co dzień"
            " pracujących w branży, pełen pierwszych wrażeń, recenzji i relacji."
        ),
    ),
]


class PicksBackend(DiscoveryBackend):
    """Hand-picked podcasts, all served by the rss backend."""

    NAME: ClassVar[str] = "picks"
    VERSION: ClassVar[str] = "1.0.0"
    DESCRIPTION: ClassVar[str] = "Hand-picked podcast recommendations"
    LABEL: ClassVar[str] = "Michcio's picks"

    async def discovery(self) -> list[Podcast]:
        return list(PICKS)
