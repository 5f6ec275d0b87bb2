"""Configuration manager for loading and saving dom314 config."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from dom314.config.defaults import DEFAULT_GLOBAL_CONFIG, get_default_config_content
from dom314.config.schema import GlobalConfig
from dom314.utils.errors import InvalidConfigError
from dom314.utils.paths import get_config_dir, get_config_file

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages the dom314 configuration file."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize the config manager.

        Args:
            config_dir: Optional custom config directory. Defaults to XDG config dir.
        """
        if config_dir is None:
            self.config_dir = get_config_dir()
            self.config_file = get_config_file()
        else:
            self.config_dir = config_dir
            self.config_file = config_dir / "config.yaml"

    def load_config(self) -> GlobalConfig:
        """Load and validate global configuration.

        Returns:
            Validated GlobalConfig instance

        Raises:
            InvalidConfigError: If config is invalid
        """
        if not self.config_file.exists():
            self._create_default_config()
            return DEFAULT_GLOBAL_CONFIG.model_copy(deep=True)

        try:
            with open(self.config_file) as f:
                data = yaml.safe_load(f) or {}
            return GlobalConfig(**data)
        except (yaml.YAMLError, ValidationError, TypeError, OSError) as e:
            raise InvalidConfigError(
                f"Invalid configuration in {self.config_file}: {e}"
            ) from e

    def save_config(self, config: GlobalConfig) -> None:
        """Save global configuration.

        Args:
            config: GlobalConfig instance to save
        """
        data = config.model_dump(mode="json")

        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_file, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        logger.debug(f"Saved configuration to {self.config_file}")

    def set_value(self, key: str, value: str) -> GlobalConfig:
        """Set a configuration value using dot notation.

        The value is parsed as YAML, so "30", "null" and "true" become a
        number, None and a boolean.

        Args:
            key: Dotted path, e.g. "player.command".
            value: New value as typed by the user.

        Returns:
            The updated, validated configuration.

        Raises:
            InvalidConfigError: If the key is unknown or the value is invalid.
        """
        data = self.load_config().model_dump(mode="json")
        parts = key.split(".")

        # Backend sections are free-form and created on demand
        free_form = parts[0] == "backends"

        target = data
        for part in parts[:-1]:
            if free_form and part not in target:
                target[part] = {}
            if not isinstance(target.get(part), dict):
                raise InvalidConfigError(f"Unknown configuration key: {key}")
            target = target[part]
        if parts[-1] not in target and not free_form:
            raise InvalidConfigError(f"Unknown configuration key: {key}")

        try:
            target[parts[-1]] = yaml.safe_load(value)
        except yaml.YAMLError as e:
            raise InvalidConfigError(f"Invalid value for {key}: {e}") from e

        try:
            config = GlobalConfig(**data)
        except ValidationError as e:
            raise InvalidConfigError(f"Invalid value for {key}: {e}") from e

        self.save_config(config)
        return config

    def _create_default_config(self) -> None:
        """Create default config.yaml file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(get_default_config_content())
