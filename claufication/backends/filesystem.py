"""Local filesystem backend."""

from pathlib import Path

from claufication.backends.base import FileSystem


class LocalFileSystem(FileSystem):
    """FileSystem implementation backed by pathlib."""

    def list_subdirectories(self, root: Path) -> set[str]:
        return {entry.name for entry in root.iterdir() if entry.is_dir()}

    def list_files(self, directory: Path) -> set[str]:
        return {entry.name for entry in directory.iterdir() if entry.is_file()}

    def stat_mtime(self, path: Path) -> float:
        return path.stat().st_mtime

    def stat_size(self, path: Path) -> int:
        return path.stat().st_size

    def read_range(self, path: Path, from_offset: int) -> bytes:
        with open(path, "rb") as f:
            f.seek(from_offset)
            return f.read()
