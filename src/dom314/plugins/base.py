"""Base plugin infrastructure for dom314 backends.

This module defines the abstract base class that all backends inherit
from, along with the backend API version constant.
"""

from abc import ABC
from typing import Any, ClassVar

from pydantic import BaseModel

# Backend API version - only changes when the backend interface has breaking changes.
# Format: "major.minor" - major must match, minor is backward compatible.
PLUGIN_API_VERSION = "1.0"


class PluginValidationError(Exception):
    """Raised when backend configuration is invalid.

    Backends should raise this from their validate() method when
    configuration is invalid or required resources are unavailable.

    Attributes:
        plugin_name: Name of the backend that failed validation.
        errors: List of validation error messages.
    """

    def __init__(self, plugin_name: str, errors: list[str]) -> None:
        self.plugin_name = plugin_name
        self.errors = errors
        error_list = "; ".join(errors)
        super().__init__(f"Backend '{plugin_name}' validation failed: {error_list}")


class Dom314Plugin(ABC):
    """Base class for all dom314 backends.

    Backends must define the required class attributes (NAME, VERSION,
    DESCRIPTION). NAME is the identifier stored next to every subscription,
    so it must stay stable across releases.

    Plugin Lifecycle:
        1. configure(config) - Called with backend-specific config
        2. validate() - Raise PluginValidationError if invalid
        3. [use backend methods]
        4. cleanup() - Called when the backend is no longer needed

    Example:
        >>> class MyBackend(FetchingBackend):
        ...     NAME = "my-backend"
        ...     VERSION = "1.0.0"
        ...     DESCRIPTION = "Fetches episodes from my service"
    """

    # Required metadata (class attributes)
    NAME: ClassVar[str]
    VERSION: ClassVar[str]
    DESCRIPTION: ClassVar[str]

    # Backend API version - should match PLUGIN_API_VERSION major version
    API_VERSION: ClassVar[str] = PLUGIN_API_VERSION

    # Optional: Pydantic model for config validation
    CONFIG_SCHEMA: ClassVar[type[BaseModel] | None] = None

    def __init__(self) -> None:
        self._initialized = False
        self._config: BaseModel | dict[str, Any] = {}

    def configure(self, config: dict[str, Any]) -> None:
        """Called with backend config before first use.

        Args:
            config: Backend-specific configuration dict. If CONFIG_SCHEMA
                is defined, this will be validated against it.
        """
        if self.CONFIG_SCHEMA:
            self._config = self.CONFIG_SCHEMA(**config)
        else:
            self._config = config
        self._initialized = True

    def validate(self) -> None:  # noqa: B027
        """Validate backend state after configuration.

        Raises:
            PluginValidationError: If backend state is invalid.
        """

    def cleanup(self) -> None:  # noqa: B027
        """Called when the backend is no longer needed."""

    @property
    def config(self) -> BaseModel | dict[str, Any]:
        """Access validated configuration.

        Raises:
            RuntimeError: If accessed before configure() is called.
        """
        if not self._initialized:
            raise RuntimeError(f"Backend {self.NAME} not configured")
        return self._config


def check_api_version_compatible(plugin_api_version: str) -> bool:
    """Check if a backend's API version is compatible with the current API.

    Compatibility rule: Major version must match exactly.

    Args:
        plugin_api_version: The backend's declared API_VERSION.

    Returns:
        True if compatible, False otherwise.
    """
    try:
        current_major = PLUGIN_API_VERSION.split(".")[0]
        plugin_major = plugin_api_version.split(".")[0]
        return current_major == plugin_major
    except (IndexError, AttributeError):
        return False
