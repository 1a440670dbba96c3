"""Abstract base classes for the capabilities Claufication consumes.

Defines the interfaces for the filesystem, process table and audio output.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class FileSystem(ABC):
    """Filesystem primitives used by the log source.

    Every method may raise OSError; callers treat that as "absent".
    """

    @abstractmethod
    def list_subdirectories(self, root: Path) -> set[str]:
        """Return the names of the directories directly under root."""

    @abstractmethod
    def list_files(self, directory: Path) -> set[str]:
        """Return the names of the regular files directly under directory."""

    @abstractmethod
    def stat_mtime(self, path: Path) -> float:
        """Return the modification time of path as a POSIX timestamp."""

    @abstractmethod
    def stat_size(self, path: Path) -> int:
        """Return the size of path in bytes."""

    @abstractmethod
    def read_range(self, path: Path, from_offset: int) -> bytes:
        """Return the bytes of path from from_offset to end of file."""


class ProcessBackend(ABC):
    """Process table query."""

    @abstractmethod
    def is_process_running(self, name: str) -> bool:
        """Check whether a process with exactly this name is running.

        Returns:
            True if running. Any failure returns False.
        """


class SoundPlayer(ABC):
    """Audio output."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend identifier (e.g., 'afplay')."""

    @abstractmethod
    def play_sound(self, name: str, volume: float) -> bool:
        """Start playing a named sound without waiting for it to finish.

        Args:
            name: Sound name (e.g., "Glass").
            volume: Volume from 0.0 to 1.0.

        Returns:
            True if playback started. Failures return False.
        """
