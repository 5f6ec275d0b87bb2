"""Backend type definitions.

This package contains base classes for the two backend capabilities:
- FetchingBackend: feed URL to episode list
- DiscoveryBackend: catalog of podcasts, with a default substring search

A single backend class may implement both.

Example:
    >>> from dom314.plugins.types import DiscoveryBackend, FetchingBackend
    >>>
    >>> class MyBackend(FetchingBackend, DiscoveryBackend):
    ...     NAME = "my-backend"
    ...     VERSION = "1.0.0"
    ...     DESCRIPTION = "Catalog and feeds of my service"
"""

from .discovery import DiscoveryBackend
from .fetching import FetchingBackend

__all__ = [
    "DiscoveryBackend",
    "FetchingBackend",
]
