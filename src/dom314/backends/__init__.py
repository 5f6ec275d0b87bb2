"""Backends shipped with dom314."""

from dom314.backends.picks import PicksBackend
from dom314.backends.rss import RSSBackend

__all__ = ["PicksBackend", "RSSBackend"]
