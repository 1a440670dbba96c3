"""Cancelable delayed callbacks keyed by logical timer name.

The scheduler never runs callbacks by itself. Its owner calls fire_due()
from its own thread of control, so callbacks are serialized with every
other mutation the owner makes.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from itertools import count

logger = logging.getLogger(__name__)

_handle_ids = count(1)


@dataclass
class TimerHandle:
    """A pending timer. Doubles as its own cancellation token."""

    name: str
    armed_at: float
    delay: float
    callback: Callable[[], None] = field(repr=False)
    cancelled: bool = False
    fired: bool = False
    id: int = field(default_factory=lambda: next(_handle_ids))

    @property
    def deadline(self) -> float:
        return self.armed_at + self.delay

    @property
    def is_live(self) -> bool:
        return not self.cancelled and not self.fired


class NotificationScheduler:
    """At most one pending timer per logical name.

    Scheduling a timer under a name that already has one pending cancels the
    old one first, so only the newest can ever fire.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """Initialize the scheduler.

        Args:
            clock: Monotonic clock in seconds.
        """
        self._clock = clock
        self._timers: dict[str, TimerHandle] = {}

    def now(self) -> float:
        return self._clock()

    def schedule(self, name: str, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Arm a timer, replacing any pending timer with the same name.

        Args:
            name: Logical timer name (e.g., "notify").
            delay: Seconds until the callback is due.
            callback: Called once by fire_due() after the delay.

        Returns:
            Handle usable with cancel().
        """
        self.cancel_timer(name)
        handle = TimerHandle(name=name, armed_at=self._clock(), delay=delay, callback=callback)
        self._timers[name] = handle
        logger.debug(f"Timer '{name}' armed for {delay:.2f}s")
        return handle

    def cancel(self, handle: TimerHandle | None) -> None:
        """Cancel a timer. Cancelling a fired or cancelled handle does nothing."""
        if handle is None or not handle.is_live:
            return
        handle.cancelled = True
        if self._timers.get(handle.name) is handle:
            del self._timers[handle.name]
        logger.debug(f"Timer '{handle.name}' cancelled")

    def cancel_timer(self, name: str) -> None:
        """Cancel the pending timer with this name, if any."""
        self.cancel(self._timers.get(name))

    def cancel_all(self) -> None:
        for handle in list(self._timers.values()):
            self.cancel(handle)

    def is_pending(self, name: str) -> bool:
        return name in self._timers

    def get_pending(self, name: str) -> TimerHandle | None:
        return self._timers.get(name)

    def next_deadline(self) -> float | None:
        """Earliest deadline among pending timers, in clock seconds."""
        if not self._timers:
            return None
        return min(handle.deadline for handle in self._timers.values())

    def fire_due(self) -> int:
        """Run the callbacks of all timers whose deadline has passed.

        Timers are fired in deadline order. A callback may schedule or cancel
        timers; a timer cancelled by an earlier callback in the same call is
        skipped.

        Returns:
            Number of callbacks run.
        """
        now = self._clock()
        due = sorted(
            (handle for handle in self._timers.values() if handle.deadline <= now),
            key=lambda handle: handle.deadline,
        )

        fired = 0
        for handle in due:
            if not handle.is_live:
                continue
            if self._timers.get(handle.name) is handle:
                del self._timers[handle.name]
            handle.fired = True
            handle.callback()
            fired += 1
        return fired
