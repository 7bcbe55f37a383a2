"""Transcript record parser.

Each line of a transcript is one JSON object. Only conversation records are
turned into messages:

- "user" (or "human"): human-authored turns. Tool results are reported back
  to the agent inside these records as tool_result blocks.
- "assistant": agent turns with text and/or tool_use blocks.

Everything else ("summary", "progress", "file-history-snapshot", ...) is
skipped, as is any line that is blank, not JSON, or not an object. Bad input
is dropped at the smallest unit possible: a block, then a message, then a line.
"""

import json
import logging
import re
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .config import SUMMARY_WINDOW_BYTES
from .core import (
    ContentBlock,
    LogFile,
    Message,
    Role,
    SessionSummary,
    TextBlock,
    ToolCall,
    ToolResult,
    extract_project_name,
)
from .errors import SessionLoadError

logger = logging.getLogger(__name__)

HUMAN_RECORD_TYPES = ("user", "human")
AGENT_RECORD_TYPES = ("assistant",)

# Matched against raw lines, not decoded records
_HUMAN_RECORD_RE = re.compile(r'"type"\s*:\s*"(?:user|human)"')


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 datetime string. Naive values are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_transcript(text: str) -> list[Message]:
    """Parse a whole transcript, keeping document order."""
    messages = []
    for line in text.splitlines():
        message = parse_record(line)
        if message is not None:
            messages.append(message)
    return messages


def parse_record(line: str) -> Optional[Message]:
    """Parse one transcript line into a Message, or None if it holds no turn."""
    entry = _decode_line(line)
    if entry is None:
        return None

    entry_type = entry.get("type")
    if entry_type not in HUMAN_RECORD_TYPES and entry_type not in AGENT_RECORD_TYPES:
        return None

    msg_data = entry.get("message")
    if not isinstance(msg_data, dict):
        return None
    role = msg_data.get("role")
    content = msg_data.get("content")
    if not isinstance(role, str) or not isinstance(content, list):
        return None

    blocks = []
    for item in content:
        block = _parse_block(item)
        if block is not None:
            blocks.append(block)

    # A turn with nothing we understand is not kept as an empty message
    if not blocks:
        return None

    return Message(
        id=_parse_uuid(entry.get("uuid")) or str(uuid.uuid4()),
        role=Role.HUMAN if role in HUMAN_RECORD_TYPES else Role.AGENT,
        content=blocks,
        timestamp=parse_timestamp(entry.get("timestamp")) or datetime.now(timezone.utc),
        parent_id=_parse_uuid(entry.get("parentUuid")),
    )


def load_messages(path: Path) -> list[Message]:
    """Read and parse a transcript file.

    Raises SessionLoadError if the file cannot be read or is not valid UTF-8.
    Malformed lines inside a readable file never raise.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SessionLoadError(path, str(e)) from e
    return parse_transcript(text)


def summarize_log_file(log_file: LogFile) -> Optional[SessionSummary]:
    """Build the listing summary for one log file, or None if it cannot be read.

    The start time comes from the first timestamped record within the head
    of the file, falling back to the file's modification time. The turn
    count comes from a separate line scan of the whole file.
    """
    path = log_file.path
    try:
        with path.open("rb") as f:
            head = f.read(SUMMARY_WINDOW_BYTES)
        # A record cut off by the window boundary simply fails to decode
        timestamp = _first_timestamp(head.decode("utf-8", errors="replace"))
        if timestamp is None:
            timestamp = log_file.modified or datetime.fromtimestamp(
                path.stat().st_mtime, tz=timezone.utc
            )

        with path.open(encoding="utf-8") as f:
            turn_count = count_human_turns(f)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to summarize %s: %s", path, e)
        return None

    project_identifier = path.parent.name
    return SessionSummary(
        id=summary_id_for(path),
        project_identifier=project_identifier,
        project_name=extract_project_name(project_identifier),
        timestamp=timestamp,
        turn_count=turn_count,
        source_path=path,
    )


def count_human_turns(lines: Iterable[str]) -> int:
    """Count raw lines that look like human-authored records."""
    return sum(1 for line in lines if _HUMAN_RECORD_RE.search(line))


def summary_id_for(path: Path) -> str:
    return str(uuid.uuid5(uuid.NAMESPACE_URL, str(path)))


# ── Private helpers ──────────────────────────────────────────────


def _decode_line(line: str) -> Optional[dict]:
    line = line.strip()
    if not line:
        return None
    try:
        entry = json.loads(line)
    except (json.JSONDecodeError, RecursionError) as e:
        logger.debug("Skipping bad JSON line: %s", e)
        return None
    if not isinstance(entry, dict):
        return None
    return entry


def _first_timestamp(text: str) -> Optional[datetime]:
    for line in text.splitlines():
        entry = _decode_line(line)
        if entry is None:
            continue
        value = entry.get("timestamp")
        if isinstance(value, str):
            return parse_timestamp(value)
    return None


def _parse_block(item: Any) -> Optional[ContentBlock]:
    """Convert one content array element. Unknown or incomplete blocks give None."""
    if not isinstance(item, dict):
        return None

    block_type = item.get("type")

    if block_type == "text":
        text = item.get("text")
        if isinstance(text, str) and text:
            return TextBlock(text)
        return None

    if block_type == "tool_use":
        call_id = item.get("id")
        name = item.get("name")
        tool_input = item.get("input")
        if isinstance(call_id, str) and isinstance(name, str) and isinstance(tool_input, dict):
            return ToolCall(id=call_id, name=name, input=tool_input)
        return None

    if block_type == "tool_result":
        tool_use_id = item.get("tool_use_id")
        if not isinstance(tool_use_id, str):
            return None
        is_error = item.get("is_error")
        return ToolResult(
            id=str(uuid.uuid4()),
            tool_call_id=tool_use_id,
            content=_tool_result_text(item.get("content")),
            is_error=is_error if isinstance(is_error, bool) else False,
        )

    return None


def _tool_result_text(content: Any) -> str:
    """Flatten tool_result content, which is a string or an array of sub-blocks."""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""

    parts = []
    for sub in content:
        if isinstance(sub, dict):
            text = sub.get("text")
            if isinstance(text, str):
                parts.append(text)
        elif isinstance(sub, str):
            parts.append(sub)
    return "\n".join(parts)


def _parse_uuid(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    try:
        return str(uuid.UUID(value))
    except ValueError:
        return None
