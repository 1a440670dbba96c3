"""Session log entry models for Claufication.

Pydantic models for the subset of the Claude Code JSONL session log that
activity inference needs. Unknown fields are ignored so new log versions
keep decoding.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class EntryKind(str, Enum):
    """Kind of a session log entry."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    OTHER = "other"

    @classmethod
    def from_type(cls, value: str | None) -> "EntryKind":
        """Map a raw ``type`` field to an EntryKind (unknown -> OTHER)."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class ContentBlock(BaseModel):
    """One typed block of assistant message content."""

    model_config = ConfigDict(extra="ignore")

    type: str = ""
    text: str | None = None
    name: str | None = None

    @field_validator("type", "text", "name", mode="before")
    @classmethod
    def _drop_non_string(cls, value: Any, info: ValidationInfo) -> Any:
        # Unknown block types may carry structured payloads under these keys
        if value is None or isinstance(value, str):
            return value
        return "" if info.field_name == "type" else None


class RecordMessage(BaseModel):
    """The ``message`` object of a session record.

    Content is either a plain string or an ordered list of typed blocks.
    A missing or null content stays None; any other shape decodes as empty
    text.
    """

    model_config = ConfigDict(extra="ignore")

    role: str | None = None
    content: str | list[ContentBlock] | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, list) and all(isinstance(block, dict) for block in value):
            return value
        return ""

    @property
    def plain_text(self) -> str:
        """Text content, with text blocks joined by newlines."""
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        return "\n".join(
            block.text for block in self.content if block.type == "text" and block.text is not None
        )

    @property
    def has_tool_use(self) -> bool:
        """Whether any content block is a tool invocation."""
        if self.content is None or isinstance(self.content, str):
            return False
        return any(block.type == "tool_use" for block in self.content)


class SessionRecord(BaseModel):
    """One raw line of a session log, as far as we care about it.

    Cost and duration metrics on ``turn_duration`` records are kept for
    logging only.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str
    timestamp: str | None = None
    subtype: str | None = None
    message: RecordMessage | None = None
    cost_usd: float | None = Field(default=None, alias="costUSD")
    duration_ms: int | None = Field(default=None, alias="durationMs")


class LogEntry(BaseModel):
    """A decoded session log entry, consumed once by the state machine.

    Attributes:
        kind: Entry kind (user, assistant, system, other).
        subtype: System subtype; only "turn_duration" matters downstream.
        text: Plain text of assistant content (may be empty).
        has_tool_invocation: True if assistant content includes a tool_use block;
            None when an assistant record carried no content at all.
    """

    kind: EntryKind
    subtype: str | None = None
    text: str = ""
    has_tool_invocation: bool | None = False

    @property
    def is_turn_end(self) -> bool:
        """True for the system marker that closes an assistant turn."""
        return self.kind == EntryKind.SYSTEM and self.subtype == "turn_duration"
