"""Services for Claufication."""

from claufication.services.activity_state_machine import (
    NOTIFY_TIMER,
    SILENCE_TIMER,
    ActivityStateMachine,
    ActivityTransition,
    ActivityTrigger,
)
from claufication.services.config_service import (
    ConfigService,
    get_config_service,
    reset_config_service,
)
from claufication.services.entry_decoder import decode_entries, decode_entry
from claufication.services.event_bus import Event, EventBus, get_event_bus, reset_event_bus
from claufication.services.log_line_source import LogLineSource, SessionCursor
from claufication.services.notification_scheduler import NotificationScheduler, TimerHandle
from claufication.services.notification_service import (
    NotificationService,
    get_notification_service,
    reset_notification_service,
)
from claufication.services.question_heuristic import looks_like_question
from claufication.services.session_monitor import SessionMonitor

__all__ = [
    # State machine
    "ActivityStateMachine",
    "ActivityTransition",
    "ActivityTrigger",
    "NOTIFY_TIMER",
    "SILENCE_TIMER",
    # Config
    "ConfigService",
    "get_config_service",
    "reset_config_service",
    # Decoding
    "decode_entries",
    "decode_entry",
    "looks_like_question",
    # Events
    "Event",
    "EventBus",
    "get_event_bus",
    "reset_event_bus",
    # Log tailing
    "LogLineSource",
    "SessionCursor",
    # Timers and notifications
    "NotificationScheduler",
    "NotificationService",
    "TimerHandle",
    "get_notification_service",
    "reset_notification_service",
    # Driver
    "SessionMonitor",
]
