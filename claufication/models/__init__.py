"""Domain models for Claufication."""

from claufication.models.activity import ActivitySnapshot, ActivityState
from claufication.models.config import (
    AVAILABLE_SOUNDS,
    AppConfig,
    NotificationConfig,
    SoundConfig,
    TimerConfig,
    WatcherConfig,
)
from claufication.models.log_entry import (
    ContentBlock,
    EntryKind,
    LogEntry,
    RecordMessage,
    SessionRecord,
)

__all__ = [
    # Activity
    "ActivitySnapshot",
    "ActivityState",
    # Config
    "AVAILABLE_SOUNDS",
    "AppConfig",
    "NotificationConfig",
    "SoundConfig",
    "TimerConfig",
    "WatcherConfig",
    # Log entries
    "ContentBlock",
    "EntryKind",
    "LogEntry",
    "RecordMessage",
    "SessionRecord",
]
