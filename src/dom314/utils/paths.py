"""Filesystem locations for dom314 data and configuration.

DOM314_CONFIG_DIR and DOM314_DATA_DIR override the platform defaults.
"""

import os
from pathlib import Path

import platformdirs

APP_NAME = "dom314"


def get_config_dir() -> Path:
    """Return the user's config directory for dom314."""
    override = os.environ.get("DOM314_CONFIG_DIR")
    if override:
        return Path(override)
    return Path(platformdirs.user_config_dir(APP_NAME))


def get_data_dir() -> Path:
    """Return the user's data directory for dom314."""
    override = os.environ.get("DOM314_DATA_DIR")
    if override:
        return Path(override)
    return Path(platformdirs.user_data_dir(APP_NAME))


def get_config_file() -> Path:
    return get_config_dir() / "config.yaml"


def get_database_file() -> Path:
    """Return the path of the state database.

    Nothing is created on disk; StateStore creates the directory on open.
    """
    return get_data_dir() / "database.sqlite3"
