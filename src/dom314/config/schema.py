"""Configuration schema models using Pydantic."""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
FailurePolicyName = Literal["strict", "partial"]


class PlayerConfig(BaseModel):
    """External media player used for playback."""

    command: str = "mpv"
    gui_args: list[str] = Field(default_factory=lambda: ["--force-window"])


class BackendSettings(BaseModel):
    """Per-backend settings."""

    enabled: bool = True
    priority: int | None = None
    config: dict[str, Any] = Field(default_factory=dict)


class GlobalConfig(BaseModel):
    """Global dom314 configuration."""

    version: str = "1"
    log_level: LogLevel = "WARNING"

    # Feed fetching
    fetch_timeout_seconds: float | None = Field(default=30.0, gt=0)
    max_concurrent_feeds: int = Field(default=10, ge=1)
    failure_policy: FailurePolicyName = "strict"

    # Views
    show_listened: bool = False  # Show listened episodes in group views

    player: PlayerConfig = Field(default_factory=PlayerConfig)
    backends: dict[str, BackendSettings] = Field(default_factory=dict)

    # Overrides the default location in the user data directory
    database_path: Path | None = None

    def backend_settings(self) -> dict[str, dict[str, Any]]:
        """Backend settings as plain dicts, without unset priorities."""
        return {
            name: settings.model_dump(exclude_none=True)
            for name, settings in self.backends.items()
        }
