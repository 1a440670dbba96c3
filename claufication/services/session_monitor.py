"""SessionMonitor: the single owner of all monitoring state.

One background thread runs three independently scheduled actions:

1. timer firings at their deadlines,
2. a log poll every ``poll_interval`` seconds,
3. a process liveness check every ``process_check_interval`` seconds.

Every mutation of the log cursor, the state machine and the timers happens
while holding ``self._lock``, and external callers (HTTP routes) go through
the same lock, so nothing interleaves.
"""

import logging
import threading
import time
from collections.abc import Callable

from claufication.backends.base import ProcessBackend
from claufication.backends.process import PgrepProcessBackend
from claufication.models.activity import ActivitySnapshot
from claufication.models.config import AppConfig, SoundConfig
from claufication.services.activity_state_machine import ActivityStateMachine
from claufication.services.entry_decoder import decode_entries
from claufication.services.event_bus import EventBus, get_event_bus
from claufication.services.log_line_source import LogLineSource
from claufication.services.notification_scheduler import NotificationScheduler
from claufication.services.notification_service import (
    NotificationService,
    get_notification_service,
)

logger = logging.getLogger(__name__)

# Upper bound on one sleep of the loop, so stop() is noticed promptly
MAX_SLEEP_SECONDS = 1.0


class SessionMonitor:
    """Central coordinator for Claufication.

    Responsibilities:
    1. Tail the active session log via LogLineSource
    2. Decode lines and fold them into the ActivityStateMachine
    3. Fire notification and silence timers on time
    4. Track whether the claude process is alive (display only)
    5. Emit events via EventBus
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        log_source: LogLineSource | None = None,
        process_backend: ProcessBackend | None = None,
        notification_service: NotificationService | None = None,
        event_bus: EventBus | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the SessionMonitor.

        Args:
            config: Application configuration. Uses defaults if not provided.
            log_source: Session log source. Built from config if not provided.
            process_backend: Process table query. Uses pgrep if not provided.
            notification_service: Sound notifications. Uses singleton if not provided.
            event_bus: Event bus for observers. Uses singleton if not provided.
            clock: Monotonic clock driving polls and timers.
        """
        self._config = config or AppConfig()
        watcher = self._config.watcher

        self._clock = clock
        self._event_bus = event_bus or get_event_bus()
        self._notifications = notification_service or get_notification_service()
        self._process_backend = process_backend or PgrepProcessBackend()
        self._log_source = log_source or LogLineSource(
            root=watcher.projects_dir,
            log_suffix=watcher.log_suffix,
            stale_after_seconds=watcher.stale_after_seconds,
        )
        self._scheduler = NotificationScheduler(clock=clock)
        self._state_machine = ActivityStateMachine(
            scheduler=self._scheduler,
            notifier=self._notifications,
            event_bus=self._event_bus,
            timers=self._config.timers,
        )

        self._poll_interval = watcher.poll_interval
        self._process_check_interval = watcher.process_check_interval
        self._process_name = watcher.process_name

        self._is_claude_running = False
        self._next_poll_at = 0.0
        self._next_process_check_at = 0.0

        # Threading
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def state_machine(self) -> ActivityStateMachine:
        return self._state_machine

    @property
    def scheduler(self) -> NotificationScheduler:
        return self._scheduler

    @property
    def log_source(self) -> LogLineSource:
        return self._log_source

    @property
    def is_claude_running(self) -> bool:
        return self._is_claude_running

    @property
    def is_running(self) -> bool:
        """Check if the monitoring thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the monitoring thread. Does nothing if already running."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop, name="claufication-monitor", daemon=True
        )
        self._thread.start()
        logger.info("SessionMonitor started")

    def stop(self) -> None:
        """Stop the monitoring thread and cancel pending timers."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None
        with self._lock:
            self._state_machine.stop()
        logger.info("SessionMonitor stopped")

    def run_pending(self) -> None:
        """Run whatever is due now: timers, then the log poll, then the process check."""
        check_process = False
        with self._lock:
            self._scheduler.fire_due()

            now = self._clock()
            if now >= self._next_poll_at:
                self._next_poll_at = now + self._poll_interval
                self.poll_logs()

            if now >= self._next_process_check_at:
                self._next_process_check_at = now + self._process_check_interval
                check_process = True

        if check_process:
            self.check_process()

    def seconds_until_next(self) -> float:
        """Seconds until the next poll, process check or timer deadline."""
        with self._lock:
            deadlines = [self._next_poll_at, self._next_process_check_at]
            timer_deadline = self._scheduler.next_deadline()
            if timer_deadline is not None:
                deadlines.append(timer_deadline)
            return max(0.0, min(deadlines) - self._clock())

    def poll_logs(self) -> int:
        """Read newly appended log lines and feed them to the state machine.

        Returns:
            Number of entries decoded.
        """
        with self._lock:
            previous_file = self._log_source.current_file
            lines = self._log_source.poll()
            current_file = self._log_source.current_file

            if current_file != previous_file:
                self._event_bus.emit(
                    "session_file_changed",
                    {"current_file": str(current_file) if current_file else None},
                )

            entries = decode_entries(lines)
            if len(entries) < len(lines):
                logger.debug(f"Skipped {len(lines) - len(entries)} undecodable lines")
            self._state_machine.handle_entries(entries)
            return len(entries)

    def check_process(self) -> bool:
        """Refresh the claude process liveness flag.

        The process query runs outside the lock; only the result is
        published under it.

        Returns:
            Whether the process is running.
        """
        try:
            running = self._process_backend.is_process_running(self._process_name)
        except Exception as e:
            logger.debug(f"Process check failed: {e}")
            running = False

        with self._lock:
            if running != self._is_claude_running:
                self._is_claude_running = running
                logger.info(f"Claude process {'running' if running else 'not running'}")
                self._event_bus.emit("process_status_changed", {"is_claude_running": running})
        return running

    def snapshot(self) -> ActivitySnapshot:
        """Current state for display."""
        with self._lock:
            current_file = self._log_source.current_file
            return self._state_machine.snapshot().model_copy(
                update={
                    "current_file": str(current_file) if current_file else None,
                    "is_claude_running": self._is_claude_running,
                }
            )

    def clear_notification(self) -> None:
        """Clear the notification flag (the user viewed the status)."""
        with self._lock:
            self._state_machine.clear_notification()

    def apply_notification_settings(
        self,
        sound: SoundConfig | None = None,
        enabled: bool | None = None,
    ) -> None:
        """Change sound preferences or the enabled flag.

        The monitor thread reads these when a timer fires, so the change is
        made under the monitor lock.
        """
        with self._lock:
            if sound is not None:
                self._notifications.apply_sound_config(sound)
            if enabled is not None:
                self._notifications.enabled = enabled

    def test_sound(self) -> bool:
        """Play the configured notification sound once."""
        return self._notifications.play()

    def _run_loop(self) -> None:
        """Background loop; one failing cycle never stops monitoring."""
        while not self._stop_event.is_set():
            try:
                self.run_pending()
            except Exception as e:
                logger.error(f"Monitor cycle error: {e}")
            sleep_for = min(self.seconds_until_next(), MAX_SLEEP_SECONDS)
            self._stop_event.wait(max(sleep_for, 0.01))
