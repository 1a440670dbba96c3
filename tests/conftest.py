"""Pytest configuration and shared fixtures for Claufication tests."""

import json
from unittest.mock import MagicMock

import pytest

from claufication.services.config_service import reset_config_service
from claufication.services.event_bus import EventBus, reset_event_bus
from claufication.services.notification_scheduler import NotificationScheduler
from claufication.services.notification_service import reset_notification_service


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset module singletons before and after each test."""
    reset_config_service()
    reset_event_bus()
    reset_notification_service()
    yield
    reset_config_service()
    reset_event_bus()
    reset_notification_service()


@pytest.fixture
def clock():
    """A fake monotonic clock."""
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    """A NotificationScheduler driven by the fake clock."""
    return NotificationScheduler(clock=clock)


@pytest.fixture
def event_bus():
    """A fresh EventBus."""
    return EventBus(buffer_size=20)


@pytest.fixture
def mock_notifier():
    """A mock NotificationService."""
    notifier = MagicMock()
    notifier.notify_waiting_input.return_value = True
    notifier.play.return_value = True
    return notifier


def user_line(text: str = "do the thing") -> str:
    return json.dumps({"type": "user", "message": {"role": "user", "content": text}})


def assistant_line(text: str = "", tool_use: bool = False) -> str:
    blocks = []
    if text:
        blocks.append({"type": "text", "text": text})
    if tool_use:
        blocks.append({"type": "tool_use", "id": "toolu_1", "name": "Bash", "input": {}})
    return json.dumps({"type": "assistant", "message": {"role": "assistant", "content": blocks}})


def turn_end_line() -> str:
    return json.dumps(
        {"type": "system", "subtype": "turn_duration", "durationMs": 1200, "costUSD": 0.01}
    )
