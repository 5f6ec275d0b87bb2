"""Backend registry for looking up backends by identifier.

This module provides the BackendRegistry class for type-safe backend
management with conflict detection and priority-based ordering.
"""

from dataclasses import dataclass, field
from typing import Generic, Literal, TypeVar

from dom314.utils.errors import Dom314Error, UnknownBackendError

from .base import Dom314Plugin

T = TypeVar("T", bound=Dom314Plugin)


class PluginConflictError(Dom314Error):
    """Raised when two backends register the same identifier.

    Attributes:
        name: The conflicting backend identifier.
        sources: Sources (entry point strings) that provide this identifier.
    """

    def __init__(self, name: str, source1: str, source2: str) -> None:
        self.name = name
        self.sources = [source1, source2]
        super().__init__(
            f"Backend name conflict: '{name}' registered by both:\n"
            f"  1. {source1}\n"
            f"  2. {source2}\n"
            "Resolve by uninstalling one of the conflicting packages."
        )


@dataclass
class PluginEntry(Generic[T]):
    """Registry entry with status information.

    Attributes:
        name: Backend identifier.
        plugin: Backend instance, or None if broken.
        status: Current status of the backend.
        error: Error message if status is "broken".
        priority: Ordering priority (higher = listed first).
        source: Where the backend came from ("builtin" or an entry point).
    """

    name: str
    plugin: T | None
    status: Literal["loaded", "broken", "disabled"]
    error: str | None = None
    priority: int = 0
    source: str = ""
    recovery_hint: str | None = field(default=None)

    @property
    def is_usable(self) -> bool:
        """Whether this backend can be used (loaded and not disabled)."""
        return self.status == "loaded" and self.plugin is not None


class BackendRegistry(Generic[T]):
    """Registry mapping backend identifiers to backend instances.

    Built once at startup and passed to the components that need to
    resolve the identifier stored with a subscription. Lookups of an
    unknown identifier raise UnknownBackendError instead of aborting.

    Standard Priority Ranges:
        - 100: Built-in backends
        - 50: Third-party backends

    Example:
        >>> registry = BackendRegistry[FetchingBackend](FetchingBackend)
        >>> registry.register("rss", RSSBackend(), priority=100, source="builtin")
        >>> backend = registry.get("rss")
    """

    PRIORITY_BUILTIN = 100
    PRIORITY_THIRDPARTY = 50

    def __init__(self, plugin_type: type[T]) -> None:
        """Initialize registry for a specific backend type.

        Args:
            plugin_type: The base backend class this registry manages.
        """
        self._plugin_type = plugin_type
        self._entries: dict[str, PluginEntry[T]] = {}

    @property
    def plugin_type(self) -> type[T]:
        return self._plugin_type

    def register(
        self,
        name: str,
        plugin: T | None,
        priority: int = 0,
        source: str = "",
        error: str | None = None,
        recovery_hint: str | None = None,
    ) -> None:
        """Register a backend with conflict detection.

        Args:
            name: Backend identifier (should match the backend's NAME).
            plugin: Backend instance, or None if load failed.
            priority: Ordering priority (higher = listed first).
            source: Where the backend came from.
            error: Error message if the backend failed to load.
            recovery_hint: Suggestion for fixing broken backends.

        Raises:
            PluginConflictError: If the identifier is already registered.
            TypeError: If plugin is not an instance of the registry's type.
        """
        if name in self._entries:
            existing = self._entries[name]
            raise PluginConflictError(name, existing.source, source)

        if plugin is not None and not isinstance(plugin, self._plugin_type):
            raise TypeError(
                f"Backend '{name}' is not a {self._plugin_type.__name__}"
            )

        self._entries[name] = PluginEntry(
            name=name,
            plugin=plugin,
            status="loaded" if plugin is not None else "broken",
            error=error,
            priority=priority,
            source=source,
            recovery_hint=recovery_hint,
        )

    def get(self, name: str) -> T:
        """Get a usable backend by identifier.

        Args:
            name: Backend identifier to look up.

        Returns:
            The registered backend instance.

        Raises:
            UnknownBackendError: If no usable backend has this identifier.
        """
        entry = self._entries.get(name)
        if entry is None or not entry.is_usable:
            raise UnknownBackendError(name, self.names())
        return entry.plugin  # type: ignore[return-value]  # is_usable guarantees plugin

    def get_entry(self, name: str) -> PluginEntry[T] | None:
        """Get full entry including status information."""
        return self._entries.get(name)

    def get_enabled(self) -> list[tuple[str, T]]:
        """Get all usable backends in priority order (highest first).

        Returns:
            List of (name, backend) tuples sorted by priority descending.
        """
        usable = [e for e in self._entries.values() if e.is_usable]
        usable.sort(key=lambda e: (-e.priority, e.name))
        return [(e.name, e.plugin) for e in usable]  # type: ignore[misc]

    def names(self) -> list[str]:
        """Identifiers of all usable backends, in priority order."""
        return [name for name, _ in self.get_enabled()]

    def disable(self, name: str) -> bool:
        """Disable a backend (keep registered but don't use).

        Returns:
            True if backend was found and disabled, False if not found.
        """
        if name in self._entries:
            self._entries[name].status = "disabled"
            return True
        return False

    def all_entries(self) -> list[PluginEntry[T]]:
        """Get all entries sorted by priority (desc) then name (asc)."""
        return sorted(
            self._entries.values(),
            key=lambda e: (-e.priority, e.name),
        )

    def get_broken(self) -> list[PluginEntry[T]]:
        """Get all broken backends for error reporting."""
        return [e for e in self._entries.values() if e.status == "broken"]

    def __len__(self) -> int:
        """Return total number of registered backends (including broken)."""
        return len(self._entries)

    def __contains__(self, name: str) -> bool:
        """Check if a backend identifier is registered."""
        return name in self._entries
