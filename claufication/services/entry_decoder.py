"""Decoding of session log lines into LogEntry records."""

import logging
from collections.abc import Iterable

from pydantic import ValidationError

from claufication.models.log_entry import EntryKind, LogEntry, SessionRecord

logger = logging.getLogger(__name__)


def decode_entry(line: str | bytes) -> LogEntry | None:
    """Decode one line of the session log.

    Args:
        line: A single JSONL line.

    Returns:
        The decoded LogEntry, or None if the line is blank or malformed.
    """
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    line = line.strip()
    if not line:
        return None

    try:
        record = SessionRecord.model_validate_json(line)
    except ValidationError:
        # Skip malformed lines gracefully
        return None

    kind = EntryKind.from_type(record.type)

    if kind == EntryKind.ASSISTANT:
        if record.message is None or record.message.content is None:
            # Nothing to say about tools; the previous flag stands
            return LogEntry(kind=kind, has_tool_invocation=None)
        return LogEntry(
            kind=kind,
            text=record.message.plain_text,
            has_tool_invocation=record.message.has_tool_use,
        )

    if kind == EntryKind.SYSTEM:
        if record.subtype == "turn_duration" and record.duration_ms is not None:
            logger.debug(f"Turn finished in {record.duration_ms}ms")
        return LogEntry(kind=kind, subtype=record.subtype)

    return LogEntry(kind=kind)


def decode_entries(lines: Iterable[str | bytes]) -> list[LogEntry]:
    """Decode a batch of lines, dropping the ones that fail.

    Args:
        lines: Raw lines in file order.

    Returns:
        Decoded entries in the same order.
    """
    entries = []
    for line in lines:
        entry = decode_entry(line)
        if entry is not None:
            entries.append(entry)
    return entries
