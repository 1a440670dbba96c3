"""macOS sound playback backend using afplay."""

import logging
import shutil
import subprocess
from pathlib import Path

from claufication.backends.base import SoundPlayer

logger = logging.getLogger(__name__)

SYSTEM_SOUNDS_DIR = Path("/System/Library/Sounds")

# Cache the afplay availability check
_afplay_available: bool | None = None


class AfplaySoundPlayer(SoundPlayer):
    """Plays macOS system sounds with afplay."""

    def __init__(self, sounds_dir: Path = SYSTEM_SOUNDS_DIR):
        """Initialize the player.

        Args:
            sounds_dir: Directory holding <name>.aiff files.
        """
        self._sounds_dir = sounds_dir

    @property
    def backend_name(self) -> str:
        """Return the backend identifier."""
        return "afplay"

    def is_available(self) -> bool:
        """Check if afplay is installed.

        Returns:
            True if the afplay binary is on PATH.
        """
        global _afplay_available
        if _afplay_available is not None:
            return _afplay_available

        _afplay_available = shutil.which("afplay") is not None
        return _afplay_available

    def sound_path(self, name: str) -> Path:
        """Path of the sound file for a sound name."""
        return self._sounds_dir / f"{name}.aiff"

    def play_sound(self, name: str, volume: float) -> bool:
        if not self.is_available():
            return False

        path = self.sound_path(name)
        if not path.exists():
            logger.debug(f"Sound not found: {path}")
            return False

        volume = min(max(volume, 0.0), 1.0)
        try:
            subprocess.Popen(
                ["afplay", "-v", f"{volume:.2f}", str(path)],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            logger.debug(f"afplay failed: {e}")
            return False
        return True


def reset_afplay_cache() -> None:
    """Reset the cached afplay availability check (for testing)."""
    global _afplay_available
    _afplay_available = None
