"""dom314 backend system.

Backend Types:
    - FetchingBackend: turn a feed URL into a list of episodes
    - DiscoveryBackend: offer a catalog of podcasts, searchable by substring

Creating a Backend:
    1. Inherit from one or both backend base classes
    2. Define required class attributes (NAME, VERSION, DESCRIPTION)
    3. Implement fetch_feed() and/or discovery()
    4. Register via entry points in pyproject.toml

Entry Point Registration (pyproject.toml):
    [project.entry-points."dom314.backends.fetching"]
    my-backend = "my_package:MyBackend"
"""

from .base import (
    PLUGIN_API_VERSION,
    Dom314Plugin,
    PluginValidationError,
    check_api_version_compatible,
)
from .discovery import (
    ENTRY_POINT_GROUPS,
    PluginLoadResult,
    discover_plugins,
    get_entry_point_group,
)
from .loader import Backends, builtin_backends, cleanup_backends, load_backends
from .registry import BackendRegistry, PluginConflictError, PluginEntry
from .types import DiscoveryBackend, FetchingBackend

__all__ = [
    # Constants
    "PLUGIN_API_VERSION",
    "ENTRY_POINT_GROUPS",
    # Base classes
    "Dom314Plugin",
    "FetchingBackend",
    "DiscoveryBackend",
    # Exceptions
    "PluginValidationError",
    "PluginConflictError",
    # Registry
    "BackendRegistry",
    "PluginEntry",
    "Backends",
    # Discovery
    "PluginLoadResult",
    "discover_plugins",
    "get_entry_point_group",
    # Loading
    "load_backends",
    "builtin_backends",
    "cleanup_backends",
    # Utilities
    "check_api_version_compatible",
]
