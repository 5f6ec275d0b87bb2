"""Backend loading and configuration.

Builds the fetching and discovery registries once at startup from the
built-in backends plus whatever third-party packages expose through
entry points.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .base import Dom314Plugin, PluginValidationError
from .discovery import discover_plugins, get_entry_point_group
from .registry import BackendRegistry
from .types import DiscoveryBackend, FetchingBackend

logger = logging.getLogger(__name__)


@dataclass
class Backends:
    """The two backend registries used by the rest of the application."""

    fetching: BackendRegistry[FetchingBackend]
    discovery: BackendRegistry[DiscoveryBackend]

    def registries(self) -> list[BackendRegistry]:
        return [self.fetching, self.discovery]


def builtin_backends() -> list[Dom314Plugin]:
    """Instantiate the backends shipped with dom314."""
    from dom314.backends.picks import PicksBackend
    from dom314.backends.rss import RSSBackend

    return [RSSBackend(), PicksBackend()]


def _configure(plugin: Dom314Plugin, settings: dict[str, Any]) -> str | None:
    """Configure and validate a backend.

    Returns:
        An error message if the backend is unusable, otherwise None.
    """
    try:
        plugin.configure(settings.get("config", {}))
        plugin.validate()
        logger.debug("Backend %s configured and validated", plugin.NAME)
    except PluginValidationError as e:
        logger.warning("Backend %s failed validation: %s", plugin.NAME, e)
        return str(e)
    except Exception as e:
        logger.error("Backend %s configuration failed: %s", plugin.NAME, e)
        return f"{type(e).__name__}: {e}"
    return None


def load_backends(
    config: dict[str, dict[str, Any]] | None = None,
    builtins: Iterable[Dom314Plugin] | None = None,
    discover: bool = True,
) -> Backends:
    """Create, configure and register all backends.

    Args:
        config: Per-backend settings keyed by identifier. Each value may
            have "enabled", "priority" and "config" keys.
        builtins: Built-in backend instances (defaults to builtin_backends()).
        discover: Whether to load third-party backends from entry points.

    Returns:
        Registries for fetching and discovery backends.

    Raises:
        PluginConflictError: If two backends share an identifier.
    """
    config = config or {}
    backends = Backends(
        fetching=BackendRegistry(FetchingBackend),
        discovery=BackendRegistry(DiscoveryBackend),
    )

    candidates: list[tuple[Dom314Plugin, int, str]] = [
        (plugin, BackendRegistry.PRIORITY_BUILTIN, "builtin")
        for plugin in (builtin_backends() if builtins is None else builtins)
    ]

    if discover:
        for registry, backend_type in (
            (backends.fetching, "fetching"),
            (backends.discovery, "discovery"),
        ):
            group = get_entry_point_group(backend_type)
            for result in discover_plugins(group, registry.plugin_type):
                if result.success and result.plugin is not None:
                    candidates.append(
                        (result.plugin, BackendRegistry.PRIORITY_THIRDPARTY, result.source)
                    )
                else:
                    registry.register(
                        name=result.name,
                        plugin=None,
                        source=result.source,
                        error=result.error,
                        recovery_hint=result.recovery_hint,
                    )

    for plugin, default_priority, source in candidates:
        settings = config.get(plugin.NAME, {})
        enabled = settings.get("enabled", True)
        priority = settings.get("priority", default_priority)
        # Disabled backends stay listed but are never configured
        error = _configure(plugin, settings) if enabled else None

        for registry in backends.registries():
            if isinstance(plugin, registry.plugin_type):
                registry.register(
                    name=plugin.NAME,
                    plugin=None if error else plugin,
                    priority=priority,
                    source=source,
                    error=error,
                )
                if not enabled:
                    registry.disable(plugin.NAME)

        if not enabled:
            logger.debug("Backend %s is disabled in config", plugin.NAME)

    return backends


def cleanup_backends(backends: Backends) -> None:
    """Call cleanup() once on every loaded backend."""
    seen: set[int] = set()
    for registry in backends.registries():
        for name, plugin in registry.get_enabled():
            if id(plugin) in seen:
                continue
            seen.add(id(plugin))
            try:
                plugin.cleanup()
                logger.debug("Cleaned up backend %s", name)
            except Exception as e:
                logger.warning("Error cleaning up backend %s: %s", name, e)
