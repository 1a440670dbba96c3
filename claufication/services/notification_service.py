"""NotificationService for alerting the user that Claude is waiting.

Plays the configured system sound and, optionally, posts a native macOS
notification through terminal-notifier.
"""

import logging
import subprocess

from claufication.backends.base import SoundPlayer
from claufication.backends.sound import AfplaySoundPlayer
from claufication.models.config import AVAILABLE_SOUNDS, SoundConfig

logger = logging.getLogger(__name__)

REASON_MESSAGES = {
    "turn_ended": "Claude finished and is waiting for you",
    "silence_timeout": "Claude may be waiting for permission",
}


class NotificationService:
    """Sound (and optional desktop) notifications.

    Every failure is logged and reported as False; nothing is raised to the
    caller.
    """

    def __init__(
        self,
        player: SoundPlayer | None = None,
        sound: SoundConfig | None = None,
        enabled: bool = True,
        desktop: bool = False,
    ):
        """
        Args:
            player: Playback backend; afplay when omitted.
            sound: Initial sound preferences; defaults when omitted.
            enabled: Master switch for notify_waiting_input().
            desktop: Also post a terminal-notifier banner.
        """
        self._player = player or AfplaySoundPlayer()
        sound = sound or SoundConfig()
        self._sound_name = sound.name
        self._volume = sound.volume
        self._enabled = enabled
        self._desktop = desktop

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = bool(value)

    @property
    def desktop(self) -> bool:
        """Whether a desktop banner accompanies the sound."""
        return self._desktop

    @desktop.setter
    def desktop(self, value: bool) -> None:
        self._desktop = bool(value)

    @property
    def sound_name(self) -> str:
        return self._sound_name

    @sound_name.setter
    def sound_name(self, value: str) -> None:
        if value not in AVAILABLE_SOUNDS:
            raise ValueError(f"Unknown sound '{value}'")
        self._sound_name = value

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = min(max(float(value), 0.0), 1.0)

    def apply_sound_config(self, sound: SoundConfig) -> None:
        """Take sound name and volume from a validated config."""
        self._sound_name = sound.name
        self._volume = sound.volume

    def play(self, sound: str | None = None, volume: float | None = None) -> bool:
        """Play a sound regardless of the enabled flag.

        Args:
            sound: Sound name. Defaults to the configured sound.
            volume: Volume from 0.0 to 1.0. Defaults to the configured volume.

        Returns:
            True if playback started.
        """
        name = sound or self._sound_name
        level = self._volume if volume is None else min(max(volume, 0.0), 1.0)
        try:
            return self._player.play_sound(name, level)
        except Exception as e:
            logger.warning(f"Sound playback failed: {e}")
            return False

    def notify_waiting_input(self, reason: str = "turn_ended") -> bool:
        """Alert the user that Claude is waiting.

        Args:
            reason: Why the notification fired ("turn_ended" or "silence_timeout").

        Returns:
            True if the sound started playing.
        """
        if not self._enabled:
            return False

        played = self.play()
        if self._desktop:
            message = REASON_MESSAGES.get(reason, "Claude is waiting for input")
            self._send_desktop_notification("Input Needed", message)
        return played

    def _send_desktop_notification(self, title: str, message: str) -> bool:
        """Post a banner with terminal-notifier; False if it could not be shown."""
        cmd = ["terminal-notifier", "-title", title, "-message", message, "-group", "claufication"]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=5)
        except FileNotFoundError:
            logger.warning("Desktop notifications need terminal-notifier (brew install terminal-notifier)")
            return False
        except subprocess.TimeoutExpired:
            logger.warning("terminal-notifier did not return within 5s")
            return False

        if result.returncode != 0:
            logger.warning(f"terminal-notifier exited {result.returncode}: {result.stderr.strip()}")
            return False
        return True


_notification_service: NotificationService | None = None


def get_notification_service() -> NotificationService:
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService()
    return _notification_service


def reset_notification_service() -> None:
    global _notification_service
    _notification_service = None
