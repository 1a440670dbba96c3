"""In-process publish/subscribe for monitor changes.

The session monitor publishes here; the SSE route and any in-process
listeners consume. Published event types:

    activity_state_changed, notification_fired, notification_cleared,
    session_file_changed, process_status_changed

Recent events are kept so a browser that connects late still sees the
current state and the last notification.
"""

import contextlib
import json
import queue
import threading
from collections import deque
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import datetime

EVENT_TYPES = (
    "activity_state_changed",
    "notification_fired",
    "notification_cleared",
    "session_file_changed",
    "process_status_changed",
)

KEEP_ALIVE = ": keep-alive\n\n"

Listener = Callable[["Event"], None]


@dataclass
class Event:
    """One published change."""

    event_type: str
    data: dict
    timestamp: datetime = field(default_factory=datetime.now)
    id: str | None = None

    def to_sse(self) -> str:
        """Render as a single SSE message (ends with a blank line)."""
        message = f"event: {self.event_type}\ndata: {json.dumps(self.data)}\n"
        if self.id:
            message += f"id: {self.id}\n"
        return message + "\n"


class EventBus:
    """Fan-out of events to listeners and SSE clients.

    Listener callbacks run on the publishing thread, after the bus lock is
    released, so a listener may publish in turn.
    """

    def __init__(self, buffer_size: int = 50, client_queue_size: int = 100):
        self._recent: deque[Event] = deque(maxlen=buffer_size)
        self._listeners: dict[str, list[Listener]] = {}
        self._clients: list[queue.Queue] = []
        self._client_queue_size = client_queue_size
        self._lock = threading.Lock()
        self._next_id = 0

    def subscribe(self, event_type: str, callback: Listener) -> None:
        """Register ``callback`` for one type; "*" receives everything."""
        with self._lock:
            self._listeners.setdefault(event_type, []).append(callback)

    def unsubscribe(self, event_type: str, callback: Listener) -> None:
        with self._lock:
            listeners = self._listeners.get(event_type)
            if listeners and callback in listeners:
                listeners.remove(callback)

    def emit(self, event_type: str, data: dict) -> Event:
        """Publish an event and return it.

        Exceptions from listeners are suppressed. An SSE client whose queue
        is full is disconnected.
        """
        with self._lock:
            self._next_id += 1
            event = Event(event_type=event_type, data=data, id=str(self._next_id))
            self._recent.append(event)
            targets = [*self._listeners.get(event_type, ()), *self._listeners.get("*", ())]
            clients = self._clients[:]

        for callback in targets:
            with contextlib.suppress(Exception):
                callback(event)

        stalled = []
        for client in clients:
            try:
                client.put_nowait(event)
            except queue.Full:
                stalled.append(client)
        for client in stalled:
            self._drop_client(client)

        return event

    def _add_client(self, include_buffer: bool) -> tuple[queue.Queue, list[Event]]:
        client: queue.Queue = queue.Queue(maxsize=self._client_queue_size)
        with self._lock:
            self._clients.append(client)
            backlog = list(self._recent) if include_buffer else []
        return client, backlog

    def _drop_client(self, client: queue.Queue) -> None:
        with self._lock:
            if client in self._clients:
                self._clients.remove(client)

    def get_sse_stream(self, include_buffer: bool = True, timeout: float = 30.0) -> Iterator[str]:
        """SSE messages for one client, until the generator is closed.

        Args:
            include_buffer: Replay recent events before live ones.
            timeout: Idle seconds before a keep-alive comment is sent.
        """
        client, backlog = self._add_client(include_buffer)
        try:
            for event in backlog:
                yield event.to_sse()
            while True:
                try:
                    yield client.get(timeout=timeout).to_sse()
                except queue.Empty:
                    yield KEEP_ALIVE
        finally:
            self._drop_client(client)

    def get_buffered_events(self, event_type: str | None = None) -> list[Event]:
        """Recent events, oldest first."""
        with self._lock:
            recent = list(self._recent)
        if event_type is None:
            return recent
        return [event for event in recent if event.event_type == event_type]

    def clear_buffer(self) -> None:
        with self._lock:
            self._recent.clear()

    @property
    def subscriber_count(self) -> int:
        """Connected SSE clients."""
        with self._lock:
            return len(self._clients)


_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    global _event_bus
    _event_bus = None
