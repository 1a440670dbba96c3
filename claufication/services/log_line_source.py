"""Incremental tailing of the active Claude Code session log.

Finds the most recently modified session log under the projects directory
and returns only the lines appended since the previous poll. History is
never replayed: when a new file becomes the active one, reading starts at
its current end.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from claufication.backends.base import FileSystem
from claufication.backends.filesystem import LocalFileSystem

logger = logging.getLogger(__name__)

DEFAULT_STALE_AFTER_SECONDS = 300.0
DEFAULT_LOG_SUFFIX = ".jsonl"


@dataclass
class SessionCursor:
    """Read position in the tracked session log."""

    file_path: Path | None = None
    byte_offset: int = 0

    def reset(self) -> None:
        self.file_path = None
        self.byte_offset = 0


class LogLineSource:
    """Polls the projects directory for newly appended session log lines.

    Layout: <root>/<project>/<session><suffix>. The newest file by mtime
    across all project directories is the active session, unless it is
    older than the staleness cutoff.
    """

    def __init__(
        self,
        root: str | Path,
        filesystem: FileSystem | None = None,
        log_suffix: str = DEFAULT_LOG_SUFFIX,
        stale_after_seconds: float = DEFAULT_STALE_AFTER_SECONDS,
        now: Callable[[], float] = time.time,
    ):
        """Initialize the log source.

        Args:
            root: Projects directory (e.g., ~/.claude/projects).
            filesystem: Filesystem primitives. Uses the local filesystem if not provided.
            log_suffix: Suffix of session log file names.
            stale_after_seconds: Maximum mtime age of an active session log.
            now: Wall clock returning POSIX timestamps.
        """
        self.root = Path(root).expanduser()
        self._fs = filesystem or LocalFileSystem()
        self._suffix = log_suffix
        self._stale_after = stale_after_seconds
        self._now = now
        self._cursor = SessionCursor()

    @property
    def cursor(self) -> SessionCursor:
        """Current read position (owned by this source; do not mutate)."""
        return self._cursor

    @property
    def current_file(self) -> Path | None:
        """The session log being tailed, if any."""
        return self._cursor.file_path

    def poll(self) -> list[str]:
        """Return the complete lines appended since the last poll.

        Never raises for I/O problems; they yield an empty list and the
        next poll retries.

        Returns:
            Non-empty lines in file order (possibly an empty list).
        """
        newest = self.find_newest_log()

        if newest is None:
            if self._cursor.file_path is not None:
                logger.info(f"No active session log (was {self._cursor.file_path.name})")
                self._cursor.reset()
            return []

        if newest != self._cursor.file_path:
            return self._switch_to(newest)

        return self._read_new_lines(newest)

    def find_newest_log(self) -> Path | None:
        """Find the most recently modified session log that is not stale.

        Returns:
            Path of the active session log, or None.
        """
        try:
            project_dirs = self._fs.list_subdirectories(self.root)
        except OSError:
            return None

        newest_file: Path | None = None
        newest_mtime = float("-inf")

        for dir_name in sorted(project_dirs):
            project_dir = self.root / dir_name
            try:
                file_names = self._fs.list_files(project_dir)
            except OSError:
                continue

            for file_name in file_names:
                if not file_name.endswith(self._suffix):
                    continue
                path = project_dir / file_name
                try:
                    mtime = self._fs.stat_mtime(path)
                except OSError:
                    continue
                if mtime > newest_mtime:
                    newest_mtime = mtime
                    newest_file = path

        if newest_file is None:
            return None

        if self._now() - newest_mtime >= self._stale_after:
            return None

        return newest_file

    def _switch_to(self, path: Path) -> list[str]:
        """Start tracking a new file from its current end."""
        try:
            size = self._fs.stat_size(path)
        except OSError as e:
            logger.debug(f"Cannot stat {path}: {e}")
            return []

        logger.info(f"Tracking session log {path}")
        self._cursor.file_path = path
        self._cursor.byte_offset = size
        return []

    def _read_new_lines(self, path: Path) -> list[str]:
        """Read bytes past the cursor and split them into lines."""
        try:
            size = self._fs.stat_size(path)
            if size < self._cursor.byte_offset:
                # Truncated in place: resume from the new end.
                logger.info(f"Session log {path.name} shrank, resetting offset")
                self._cursor.byte_offset = size
                return []
            data = self._fs.read_range(path, self._cursor.byte_offset)
        except OSError as e:
            logger.debug(f"Error reading {path}: {e}")
            return []

        if not data:
            return []

        self._cursor.byte_offset += len(data)

        text = data.decode("utf-8", errors="replace")
        return [line for line in text.split("\n") if line]
