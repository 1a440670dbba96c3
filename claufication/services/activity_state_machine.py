"""Activity State Machine for inferring when Claude is waiting on the user.

Folds decoded session log entries into an ActivityState and arms the
"notify" and "silence" timers that eventually raise a notification.

```
IDLE ──user/assistant──▶ WORKING ──turn_duration──▶ WAITING_INPUT
                           │  ▲                          │
                           │  └────user/assistant────────┘
                           └──silence after tool_use──▶ WAITING_INPUT
```
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from claufication.models.activity import ActivitySnapshot, ActivityState
from claufication.models.config import TimerConfig
from claufication.models.log_entry import EntryKind, LogEntry
from claufication.services.event_bus import EventBus, get_event_bus
from claufication.services.notification_scheduler import NotificationScheduler
from claufication.services.notification_service import NotificationService
from claufication.services.question_heuristic import looks_like_question

logger = logging.getLogger(__name__)

NOTIFY_TIMER = "notify"
SILENCE_TIMER = "silence"


class ActivityTrigger(str, Enum):
    """Triggers that cause state transitions."""

    USER_MESSAGE = "user_message"
    """A user entry arrived (any → WORKING)."""

    ASSISTANT_MESSAGE = "assistant_message"
    """An assistant entry arrived (any → WORKING)."""

    TURN_ENDED = "turn_ended"
    """A turn_duration marker closed the turn (any → WAITING_INPUT)."""

    SILENCE_TIMEOUT = "silence_timeout"
    """No output after a tool call (WORKING → WAITING_INPUT)."""


@dataclass
class ActivityTransition:
    """A recorded state change."""

    from_state: ActivityState
    to_state: ActivityState
    trigger: ActivityTrigger
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "from_state": self.from_state.value,
            "to_state": self.to_state.value,
            "trigger": self.trigger.value,
            "timestamp": self.timestamp.isoformat(),
        }


class ActivityStateMachine:
    """Infers Idle / Working / WaitingInput from session log entries.

    Not thread-safe on its own: the owner (SessionMonitor) must serialize
    handle_entries(), the scheduler's fire_due() and clear_notification().
    """

    def __init__(
        self,
        scheduler: NotificationScheduler,
        notifier: NotificationService,
        event_bus: EventBus | None = None,
        timers: TimerConfig | None = None,
    ):
        """Initialize the ActivityStateMachine.

        Args:
            scheduler: Timer facility for the notify and silence timers.
            notifier: Plays the notification when a timer fires.
            event_bus: Event bus for observers. Uses singleton if not provided.
            timers: Timer delays. Uses defaults if not provided.
        """
        self._scheduler = scheduler
        self._notifier = notifier
        self._event_bus = event_bus or get_event_bus()
        self._timers = timers or TimerConfig()

        self._state = ActivityState.IDLE
        self._has_notification = False
        self._last_assistant_text = ""
        self._last_assistant_had_tool_use = False
        self._history: list[ActivityTransition] = []

    @property
    def state(self) -> ActivityState:
        return self._state

    @property
    def has_notification(self) -> bool:
        return self._has_notification

    @property
    def last_assistant_text(self) -> str:
        return self._last_assistant_text

    @property
    def last_assistant_had_tool_use(self) -> bool:
        return self._last_assistant_had_tool_use

    @property
    def history(self) -> list[ActivityTransition]:
        """Transitions so far, oldest first."""
        return list(self._history)

    def handle_entries(self, entries: list[LogEntry]) -> None:
        """Fold one poll batch of entries into the state.

        Fresh output resets a pending silence timer; it is re-armed at the
        end of the batch if the agent is still working on a tool call.

        Args:
            entries: Decoded entries in arrival order.
        """
        if not entries:
            return

        if self._scheduler.is_pending(SILENCE_TIMER):
            self._scheduler.cancel_timer(SILENCE_TIMER)

        for entry in entries:
            self._process_entry(entry)

        if self._last_assistant_had_tool_use and self._state == ActivityState.WORKING:
            self._scheduler.schedule(
                SILENCE_TIMER, self._timers.silence_timeout, self._on_silence_timeout
            )

    def clear_notification(self) -> None:
        """Clear the notification flag (the user has looked)."""
        if not self._has_notification:
            return
        self._has_notification = False
        self._event_bus.emit("notification_cleared", {})

    def stop(self) -> None:
        """Cancel both timers."""
        self._scheduler.cancel_timer(NOTIFY_TIMER)
        self._scheduler.cancel_timer(SILENCE_TIMER)

    def snapshot(self) -> ActivitySnapshot:
        """Current state as a read-only snapshot."""
        return ActivitySnapshot(
            state=self._state,
            state_label=self._state.label,
            has_notification=self._has_notification,
            last_assistant_text=self._last_assistant_text,
        )

    def _process_entry(self, entry: LogEntry) -> None:
        if entry.kind == EntryKind.USER:
            self._scheduler.cancel_timer(NOTIFY_TIMER)
            self.clear_notification()
            self._last_assistant_had_tool_use = False
            self._set_state(ActivityState.WORKING, ActivityTrigger.USER_MESSAGE)

        elif entry.kind == EntryKind.ASSISTANT:
            if entry.text:
                self._last_assistant_text = entry.text
            if entry.has_tool_invocation is not None:
                self._last_assistant_had_tool_use = entry.has_tool_invocation
            self._set_state(ActivityState.WORKING, ActivityTrigger.ASSISTANT_MESSAGE)

        elif entry.is_turn_end:
            self._last_assistant_had_tool_use = False
            self._handle_turn_end()

    def _handle_turn_end(self) -> None:
        is_question = looks_like_question(self._last_assistant_text)
        self._set_state(ActivityState.WAITING_INPUT, ActivityTrigger.TURN_ENDED)

        delay = self._timers.question_delay if is_question else self._timers.statement_delay
        self._scheduler.schedule(NOTIFY_TIMER, delay, self._on_notify_timer)

    def _on_notify_timer(self) -> None:
        if self._state != ActivityState.WAITING_INPUT:
            return
        self._fire_notification("turn_ended")

    def _on_silence_timeout(self) -> None:
        if self._state != ActivityState.WORKING or not self._last_assistant_had_tool_use:
            return
        self._set_state(ActivityState.WAITING_INPUT, ActivityTrigger.SILENCE_TIMEOUT)
        self._fire_notification("silence_timeout")

    def _fire_notification(self, reason: str) -> None:
        logger.info(f"Claude is waiting for input ({reason})")
        self._has_notification = True
        self._event_bus.emit(
            "notification_fired",
            {"reason": reason, "last_assistant_text": self._last_assistant_text[:200]},
        )
        self._notifier.notify_waiting_input(reason)

    def _set_state(self, new_state: ActivityState, trigger: ActivityTrigger) -> None:
        if new_state == self._state:
            return

        transition = ActivityTransition(
            from_state=self._state,
            to_state=new_state,
            trigger=trigger,
        )
        self._state = new_state
        self._history.append(transition)
        if len(self._history) > 100:
            self._history = self._history[-100:]

        logger.debug(f"{transition.from_state.value} → {transition.to_state.value}")
        self._event_bus.emit("activity_state_changed", transition.to_dict())
