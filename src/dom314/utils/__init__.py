"""Utility functions and helpers for dom314."""

from dom314.utils.errors import (
    AggregationError,
    ConfigError,
    Dom314Error,
    FetchError,
    FetchTimeoutError,
    InvalidConfigError,
    PlayerError,
    StorageError,
    UnknownBackendError,
    UnknownGroupError,
)
from dom314.utils.paths import (
    get_config_dir,
    get_config_file,
    get_data_dir,
    get_database_file,
)

__all__ = [
    # Errors
    "Dom314Error",
    "ConfigError",
    "InvalidConfigError",
    "FetchError",
    "FetchTimeoutError",
    "UnknownBackendError",
    "UnknownGroupError",
    "StorageError",
    "AggregationError",
    "PlayerError",
    # Paths
    "get_config_dir",
    "get_data_dir",
    "get_config_file",
    "get_database_file",
]
