"""Activity state model."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ActivityState(str, Enum):
    """Inferred activity of the Claude Code agent.

    State transitions:
    - any → WORKING (user or assistant entry)
    - any → WAITING_INPUT (turn ended, or silence after a tool call)
    """

    IDLE = "idle"
    """No activity seen yet."""

    WORKING = "working"
    """Agent is producing output."""

    WAITING_INPUT = "waiting_input"
    """Agent appears blocked on the user."""

    @property
    def label(self) -> str:
        """Human-readable label for status displays."""
        return _LABELS[self]


_LABELS = {
    ActivityState.IDLE: "Idle",
    ActivityState.WORKING: "Working",
    ActivityState.WAITING_INPUT: "Waiting for Input",
}


class ActivitySnapshot(BaseModel):
    """Read-only view of the monitor published to observers."""

    state: ActivityState = Field(default=ActivityState.IDLE)
    state_label: str = Field(default="Idle")
    has_notification: bool = Field(
        default=False,
        description="Set when a notification fired and the user has not looked yet",
    )
    last_assistant_text: str = Field(default="")
    current_file: str | None = Field(
        default=None,
        description="Session log currently being tailed",
    )
    is_claude_running: bool = Field(default=False)
    updated_at: datetime = Field(default_factory=datetime.now)
