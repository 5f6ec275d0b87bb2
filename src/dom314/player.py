"""Hand-off of episodes to an external media player."""

import logging
import os
import subprocess

from dom314.config.schema import PlayerConfig
from dom314.state.store import StateStore
from dom314.utils.errors import PlayerError

logger = logging.getLogger(__name__)


def has_display() -> bool:
    """Whether a graphical session is available."""
    return bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))


def build_command(audio_url: str, config: PlayerConfig, gui: bool) -> list[str]:
    command = [config.command, audio_url]
    if gui:
        command.extend(config.gui_args)
    return command


def start_player(audio_url: str, config: PlayerConfig | None = None) -> None:
    """Start the player for an audio URL.

    With a display the player gets its own window and runs detached from
    the terminal; otherwise it runs in the foreground until it exits.

    Raises:
        PlayerError: If the player executable cannot be started.
    """
    config = config or PlayerConfig()
    gui = has_display()
    command = build_command(audio_url, config, gui)
    logger.debug(f"Starting player: {command}")

    try:
        if gui:
            subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        else:
            subprocess.run(command, check=False)
    except OSError as e:
        raise PlayerError(f"Could not start player '{config.command}': {e}") from e


def listen(store: StateStore, audio_url: str, config: PlayerConfig | None = None) -> None:
    """Play an episode and mark it as listened once the player started."""
    start_player(audio_url, config)
    store.set_listened(audio_url, True)
