"""DiscoveryBackend base class for podcast catalogs."""

from abc import abstractmethod
from typing import ClassVar

from dom314.feeds.models import Podcast
from dom314.plugins.base import Dom314Plugin


class DiscoveryBackend(Dom314Plugin):
    """Base class for backends that offer a list of podcasts.

    Class Attributes (optional):
        LABEL: Human-readable name shown in discovery menus.
    """

    LABEL: ClassVar[str] = ""

    @property
    def label(self) -> str:
        return self.LABEL or self.NAME

    @abstractmethod
    async def discovery(self) -> list[Podcast]:
        """Return the backend's catalog of podcasts.

        Raises:
            FetchError: If the catalog could not be retrieved.
        """

    async def search(self, query: str) -> list[Podcast]:
        """Find podcasts whose title or description contains query.

        Matching is a case-sensitive substring test over the full catalog.
        Backends with server-side search should override this.

        Args:
            query: Text to look for.

        Returns:
            Matching podcasts in catalog order.
        """
        podcasts = await self.discovery()
        return [
            podcast
            for podcast in podcasts
            if query in podcast.title or query in podcast.description
        ]
