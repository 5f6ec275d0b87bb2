"""Backend discovery via importlib.metadata entry points.

Third-party packages register backends under these groups:
    - dom314.backends.fetching: FetchingBackend implementations
    - dom314.backends.discovery: DiscoveryBackend implementations
"""

import logging
from collections.abc import Iterator
from importlib.metadata import entry_points

from .base import PLUGIN_API_VERSION, Dom314Plugin, check_api_version_compatible

logger = logging.getLogger(__name__)


ENTRY_POINT_GROUPS = {
    "fetching": "dom314.backends.fetching",
    "discovery": "dom314.backends.discovery",
}


class PluginLoadResult:
    """Result of attempting to load a single backend.

    Attributes:
        name: Backend identifier (from entry point).
        plugin: Loaded backend instance, or None if load failed.
        error: Error message if load failed.
        recovery_hint: Suggestion for fixing the issue.
        source: Entry point source string.
    """

    def __init__(
        self,
        name: str,
        plugin: Dom314Plugin | None,
        error: str | None = None,
        recovery_hint: str | None = None,
        source: str = "",
    ) -> None:
        self.name = name
        self.plugin = plugin
        self.error = error
        self.recovery_hint = recovery_hint
        self.source = source

    @property
    def success(self) -> bool:
        """Whether the backend loaded successfully."""
        return self.plugin is not None and self.error is None


def _generate_recovery_hint(error: Exception) -> str | None:
    """Generate a recovery hint based on the error type."""
    if isinstance(error, ModuleNotFoundError):
        module_name = getattr(error, "name", None)
        if module_name:
            return f"pip install {module_name}"
        return "Check that all backend dependencies are installed"

    if isinstance(error, ImportError):
        return "Check import paths and dependencies"

    if isinstance(error, TypeError) and "__init__" in str(error):
        return "Backend __init__ must accept no required arguments"

    return None


def discover_plugins(
    group: str,
    base_class: type[Dom314Plugin] = Dom314Plugin,
) -> Iterator[PluginLoadResult]:
    """Discover and yield backends from an entry point group.

    Failed loads yield results with error information instead of raising.

    Args:
        group: Entry point group name (e.g., "dom314.backends.fetching").
        base_class: Class every loaded backend must derive from.

    Yields:
        PluginLoadResult for each discovered entry point.
    """
    for ep in entry_points(group=group):
        source = f"{group}:{ep.name}"
        name = ep.name

        try:
            plugin_class = ep.load()

            if not isinstance(plugin_class, type) or not issubclass(plugin_class, base_class):
                yield PluginLoadResult(
                    name=name,
                    plugin=None,
                    error=(
                        f"Entry point does not point to a {base_class.__name__} "
                        f"subclass: {plugin_class}"
                    ),
                    source=source,
                )
                continue

            plugin_api_version = getattr(plugin_class, "API_VERSION", PLUGIN_API_VERSION)
            if not check_api_version_compatible(plugin_api_version):
                yield PluginLoadResult(
                    name=name,
                    plugin=None,
                    error=(
                        f"Incompatible API version: backend requires {plugin_api_version}, "
                        f"but current API is {PLUGIN_API_VERSION}"
                    ),
                    recovery_hint="Update the backend to a compatible version",
                    source=source,
                )
                continue

            plugin = plugin_class()
            logger.debug("Loaded backend %s from %s", name, source)
            yield PluginLoadResult(name=name, plugin=plugin, source=source)

        except Exception as e:
            error_msg = f"{type(e).__name__}: {e}"
            logger.warning("Failed to load backend %s: %s", name, error_msg)
            yield PluginLoadResult(
                name=name,
                plugin=None,
                error=error_msg,
                recovery_hint=_generate_recovery_hint(e),
                source=source,
            )


def get_entry_point_group(backend_type: str) -> str:
    """Get the entry point group name for a backend type.

    Args:
        backend_type: "fetching" or "discovery".

    Raises:
        ValueError: If backend_type is not recognized.
    """
    if backend_type not in ENTRY_POINT_GROUPS:
        valid = ", ".join(ENTRY_POINT_GROUPS.keys())
        raise ValueError(f"Unknown backend type: {backend_type}. Valid types: {valid}")
    return ENTRY_POINT_GROUPS[backend_type]
