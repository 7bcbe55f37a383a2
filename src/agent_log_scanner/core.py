"""Core data models for agent-log-scanner."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

JSONValue = Union[None, bool, int, float, str, list["JSONValue"], dict[str, "JSONValue"]]


class Role(str, Enum):
    HUMAN = "user"
    AGENT = "assistant"


@dataclass(frozen=True)
class LogFile:
    """A discovered transcript file."""

    path: Path
    modified: Optional[datetime] = None  # None when the mtime could not be read


@dataclass(frozen=True)
class SessionSummary:
    """Lightweight per-file metadata for session listings."""

    id: str  # uuid5 of the source path, stable across scans
    project_identifier: str  # e.g. "-Users-alice-Code-widget"
    project_name: str  # e.g. "widget"
    timestamp: datetime
    turn_count: int
    source_path: Path


@dataclass(frozen=True)
class TextBlock:
    text: str


@dataclass
class ToolCall:
    id: str
    name: str
    input: dict[str, JSONValue] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolResult:
    id: str  # generated, not taken from the log
    tool_call_id: str
    content: str
    is_error: bool = False


ContentBlock = Union[TextBlock, ToolCall, ToolResult]


@dataclass
class Message:
    """A single conversation turn."""

    id: str
    role: Role
    content: list[ContentBlock]
    timestamp: datetime
    parent_id: Optional[str] = None

    @property
    def text_content(self) -> str:
        return "\n".join(block.text for block in self.content if isinstance(block, TextBlock))

    @property
    def tool_calls(self) -> list[ToolCall]:
        return [block for block in self.content if isinstance(block, ToolCall)]


@dataclass(frozen=True)
class SessionStats:
    """Counts derived from a parsed message sequence."""

    human_message_count: int = 0
    agent_message_count: int = 0
    turn_count: int = 0
    tool_call_count: int = 0
    tool_calls_by_name: dict[str, int] = field(default_factory=dict)
    error_count: int = 0
    duration: Optional[timedelta] = None  # may be negative when timestamps run backwards

    @property
    def formatted_duration(self) -> Optional[str]:
        if self.duration is None:
            return None

        seconds = int(self.duration.total_seconds())
        sign = "-" if seconds < 0 else ""
        seconds = abs(seconds)
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60

        if hours > 0:
            return f"{sign}{hours}h {minutes}m"
        elif minutes > 0:
            return f"{sign}{minutes}m"
        return "<1m"


@dataclass
class Session:
    """A fully loaded conversation with its derived stats."""

    id: str
    project_path: str
    messages: list[Message]
    project_name: str = field(init=False)
    stats: SessionStats = field(init=False)

    def __post_init__(self):
        from .stats import compute_stats

        self.project_name = extract_project_name(self.project_path)
        self.stats = compute_stats(self.messages)


class Category(str, Enum):
    PREFERENCE = "preference"
    WORKFLOW = "workflow"
    TOOL_USAGE = "tool-usage"
    ERROR_PREVENTION = "error-prevention"
    KNOWLEDGE = "knowledge"
    SKILL = "skill"

    @classmethod
    def parse(cls, value: Any) -> "Category":
        """Return the matching category, or KNOWLEDGE for anything unrecognized."""
        try:
            return cls(value)
        except (ValueError, TypeError):
            return cls.KNOWLEDGE

    @property
    def display_name(self) -> str:
        return self.value.replace("-", " ").title()


class Target(str, Enum):
    PROJECT = "project"
    GLOBAL = "global"

    @classmethod
    def parse(cls, value: Any) -> "Target":
        """Return the matching target, or PROJECT for anything unrecognized."""
        try:
            return cls(value)
        except (ValueError, TypeError):
            return cls.PROJECT

    @property
    def display_name(self) -> str:
        return "Global CLAUDE.md" if self is Target.GLOBAL else "Project CLAUDE.md"


_SUGGESTION_TEXT_FIELDS = ("suggestion", "reasoning", "evidence")


@dataclass(frozen=True)
class AnalysisSuggestion:
    """One actionable suggestion returned by an analysis provider."""

    category: Category
    target: Target
    suggestion: str
    reasoning: str
    evidence: str
    # Providers never send an id, so a fresh one is minted on every decode.
    id: str = field(default_factory=lambda: str(uuid.uuid4()), compare=False)

    @classmethod
    def from_dict(cls, data: dict) -> "AnalysisSuggestion":
        """Decode a suggestion object.

        Unknown ``category``/``target`` values fall back to their defaults.
        Raises ValueError if any of the text fields is missing or not a string.
        """
        for key in _SUGGESTION_TEXT_FIELDS:
            if not isinstance(data.get(key), str):
                raise ValueError(f"suggestion field {key!r} missing or not a string")

        return cls(
            category=Category.parse(data.get("category")),
            target=Target.parse(data.get("target")),
            suggestion=data["suggestion"],
            reasoning=data["reasoning"],
            evidence=data["evidence"],
        )

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "target": self.target.value,
            "suggestion": self.suggestion,
            "reasoning": self.reasoning,
            "evidence": self.evidence,
        }


@dataclass
class AnalysisRecord:
    """The persisted result of analysing one log file."""

    source_path: str
    analyzed_at: datetime
    suggestions: list[AnalysisSuggestion] = field(default_factory=list)


def decode_project_path(identifier: str) -> str:
    """Turn a project directory name back into the absolute path it was derived from.

    -Users-alice-dev-foo -> /Users/alice/dev/foo
    widget -> /widget
    """
    decoded = identifier.replace("-", "/")
    if not decoded.startswith("/"):
        decoded = "/" + decoded
    return decoded


def extract_project_name(identifier: str) -> str:
    """Return the last path component of a decoded project identifier."""
    decoded = identifier.replace("-", "/").strip("/")
    parts = [part for part in decoded.split("/") if part]
    if parts:
        return parts[-1]
    return identifier
