"""RSS/Atom fetching backend using httpx and feedparser."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, ClassVar

import feedparser
import httpx
from pydantic import BaseModel

from dom314 import __version__
from dom314.feeds.models import Episode
from dom314.feeds.ordering import order_episodes
from dom314.plugins.types import FetchingBackend
from dom314.utils.errors import FetchError, FetchTimeoutError

logger = logging.getLogger(__name__)


class RSSBackendConfig(BaseModel):
    """Settings for the rss backend."""

    timeout_seconds: float = 30.0
    user_agent: str = f"dom314/{__version__}"


class RSSBackend(FetchingBackend):
    """Fetches podcast feeds over HTTP and parses them with feedparser.

    Every audio enclosure of an item becomes its own episode. Items without
    a publication date are dated at fetch time.
    """

    NAME: ClassVar[str] = "rss"
    VERSION: ClassVar[str] = "1.0.0"
    DESCRIPTION: ClassVar[str] = "RSS and Atom podcast feeds"
    CONFIG_SCHEMA: ClassVar[type[BaseModel] | None] = RSSBackendConfig

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Initialize the backend.

        Args:
            transport: Optional httpx transport (used to stub the network).
        """
        super().__init__()
        self._transport = transport
        self._config = RSSBackendConfig()

    @property
    def settings(self) -> RSSBackendConfig:
        config = self._config
        if isinstance(config, RSSBackendConfig):
            return config
        return RSSBackendConfig(**config)

    async def fetch_feed(self, feed_url: str) -> list[Episode]:
        """Download and parse a feed.

        Raises:
            FetchTimeoutError: If the server did not answer in time.
            FetchError: On HTTP errors or unparseable feeds.
        """
        logger.debug(f"Fetching RSS feed {feed_url}")
        settings = self.settings
        try:
            async with httpx.AsyncClient(
                timeout=settings.timeout_seconds,
                follow_redirects=True,
                headers={"User-Agent": settings.user_agent},
                transport=self._transport,
            ) as client:
                response = await client.get(feed_url)
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise FetchTimeoutError(f"Timed out fetching {feed_url}", feed_url) from e
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"HTTP {e.response.status_code} fetching {feed_url}", feed_url
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(f"Network error fetching {feed_url}: {e}", feed_url) from e

        episodes = await asyncio.to_thread(parse_episodes, response.content, feed_url)
        logger.debug(f"Parsed {len(episodes)} episodes from {feed_url}")
        return episodes


def parse_episodes(
    content: bytes,
    feed_url: str,
    now: datetime | None = None,
) -> list[Episode]:
    """Turn raw feed content into an ordered episode list.

    Args:
        content: RSS or Atom document.
        feed_url: URL the document was fetched from (for relative links).
        now: Date used for items without one (defaults to the current time).

    Returns:
        Episodes ordered oldest first.

    Raises:
        FetchError: If the document is not a feed.
    """
    feed = feedparser.parse(content, response_headers={"content-location": feed_url})
    if feed.bozo and not feed.entries:
        raise FetchError(f"Failed to parse feed {feed_url}: {feed.bozo_exception}", feed_url)
    if not feed.get("version") and not feed.entries:
        raise FetchError(f"Not an RSS or Atom feed: {feed_url}", feed_url)

    fallback_date = now or datetime.now(timezone.utc)
    podcast = feed.feed.get("title", "")

    episodes = []
    for entry in feed.entries:
        published = _entry_date(entry) or fallback_date
        title = entry.get("title") or podcast
        description = entry.get("summary", "")
        for audio_url in _media_urls(entry):
            episodes.append(
                Episode(
                    podcast=podcast,
                    title=title,
                    description=description,
                    published_at=published,
                    audio_url=audio_url,
                )
            )

    return order_episodes(episodes)


def _entry_date(entry: Any) -> datetime | None:
    """Publication (or last update) date of an entry as an aware datetime."""
    for field_name in ("published_parsed", "updated_parsed"):
        parsed = entry.get(field_name)
        if parsed:
            try:
                return datetime(*parsed[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                continue
    return None


def _media_urls(entry: Any) -> list[str]:
    """Audio URLs of an entry: enclosures first, then media:content."""
    urls: list[str] = []
    for enclosure in entry.get("enclosures", []):
        url = enclosure.get("href") or enclosure.get("url")
        if url and url not in urls:
            urls.append(url)
    for media in entry.get("media_content", []):
        url = media.get("url")
        if url and url not in urls:
            urls.append(url)
    return urls
