"""Backends for the filesystem, process table and audio output."""

from claufication.backends.base import FileSystem, ProcessBackend, SoundPlayer
from claufication.backends.filesystem import LocalFileSystem
from claufication.backends.process import PgrepProcessBackend
from claufication.backends.sound import AfplaySoundPlayer, reset_afplay_cache

__all__ = [
    "AfplaySoundPlayer",
    "FileSystem",
    "LocalFileSystem",
    "PgrepProcessBackend",
    "ProcessBackend",
    "SoundPlayer",
    "reset_afplay_cache",
]
