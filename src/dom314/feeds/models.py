"""Data models for podcasts and episodes."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator


class Podcast(BaseModel):
    """A podcast offered by a discovery backend.

    Podcasts are re-derived on every discovery call and never persisted.
    """

    model_config = ConfigDict(frozen=True)

    backend: str  # Identifier of the fetching backend serving this feed
    feed_url: str
    title: str
    description: str = ""


class Episode(BaseModel):
    """A single episode as returned by a fetching backend."""

    model_config = ConfigDict(frozen=True)

    podcast: str  # Display name of the parent podcast
    title: str
    description: str = ""
    published_at: datetime
    audio_url: str  # Identity key for listened state

    @field_validator("published_at")
    @classmethod
    def to_local_time(cls, value: datetime) -> datetime:
        """Normalize timestamps to the local timezone.

        Naive datetimes are interpreted as local time.
        """
        return value.astimezone()

    @property
    def published_date(self) -> str:
        """Publication date formatted for display."""
        return self.published_at.strftime("%Y-%m-%d")
