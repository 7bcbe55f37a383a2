"""Shared test fixtures for agent-log-scanner."""

import json
import os
from datetime import datetime, timezone

import pytest

PROJECT_ID = "-Users-testuser-dev-myapp"
OTHER_PROJECT_ID = "-Users-testuser-dev-widget"

UUID_1 = "0b5c1d2e-0000-4000-8000-000000000001"
UUID_2 = "0b5c1d2e-0000-4000-8000-000000000002"
UUID_3 = "0b5c1d2e-0000-4000-8000-000000000003"


def _write_jsonl(path, entries, mtime=None):
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [e if isinstance(e, str) else json.dumps(e) for e in entries]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    if mtime is not None:
        ts = mtime.timestamp()
        os.utime(path, (ts, ts))
    return path


@pytest.fixture
def write_jsonl():
    """Return a helper that writes records (dicts or raw strings) as a JSONL file."""
    return _write_jsonl


@pytest.fixture
def session_entries():
    """A realistic transcript.

    Includes:
    - Human text turns and tool_result turns
    - Agent text + tool_use in the same record
    - A failed tool result
    - Records that are not conversation turns (should be skipped)
    - An agent turn with only a thinking block (should be dropped)
    """
    return [
        # 1. Human prompt
        {
            "type": "user",
            "message": {"role": "user", "content": [{"type": "text", "text": "Help me refactor the auth module"}]},
            "timestamp": "2025-01-20T10:00:00Z",
            "uuid": UUID_1,
            "parentUuid": None,
        },
        # 2. Agent text + tool_use
        {
            "type": "assistant",
            "message": {"role": "assistant", "content": [
                {"type": "text", "text": "Let me start by reading the current code."},
                {"type": "tool_use", "id": "toolu_001", "name": "Read", "input": {"file_path": "/src/auth.ts"}},
            ]},
            "timestamp": "2025-01-20T10:00:30Z",
            "uuid": UUID_2,
            "parentUuid": UUID_1,
        },
        # 3. Tool result with string content
        {
            "type": "user",
            "message": {"role": "user", "content": [
                {"type": "tool_result", "tool_use_id": "toolu_001", "content": "export function authenticate() {}"},
            ]},
            "timestamp": "2025-01-20T10:00:31Z",
            "uuid": UUID_3,
            "parentUuid": UUID_2,
        },
        # 4. Agent thinking + text + tool_use
        {
            "type": "assistant",
            "message": {"role": "assistant", "content": [
                {"type": "thinking", "thinking": "Split validation from refresh."},
                {"type": "text", "text": "I'll split it into separate concerns."},
                {"type": "tool_use", "id": "toolu_002", "name": "Edit", "input": {"file_path": "/src/auth.ts", "new_content": "..."}},
            ]},
            "timestamp": "2025-01-20T10:01:00Z",
        },
        # 5. Failed tool result
        {
            "type": "user",
            "message": {"role": "user", "content": [
                {"type": "tool_result", "tool_use_id": "toolu_002", "content": "old_string not found", "is_error": True},
            ]},
            "timestamp": "2025-01-20T10:01:01Z",
        },
        # 6. file-history-snapshot (skipped)
        {"type": "file-history-snapshot", "files": [{"path": "/src/auth.ts"}]},
        # 7. Human follow-up
        {
            "type": "user",
            "message": {"role": "user", "content": [{"type": "text", "text": "Looks good, now split it into separate files"}]},
            "timestamp": "2025-01-20T10:05:00Z",
        },
        # 8. Agent tool_use only
        {
            "type": "assistant",
            "message": {"role": "assistant", "content": [
                {"type": "tool_use", "id": "toolu_003", "name": "Bash", "input": {"command": "mkdir -p /src/auth/"}},
            ]},
            "timestamp": "2025-01-20T10:05:30Z",
        },
        # 9. progress (skipped)
        {"type": "progress", "data": {"type": "hook_progress"}},
        # 10. summary (skipped)
        {"type": "summary", "summary": "Refactored auth module"},
        # 11. Tool result with an array of sub-blocks
        {
            "type": "user",
            "message": {"role": "user", "content": [
                {"type": "tool_result", "tool_use_id": "toolu_003", "content": [
                    {"type": "text", "text": "Command output:"},
                    {"type": "image", "source": {"type": "base64", "media_type": "image/png", "data": "iVBORw0KGgo="}},
                    {"type": "text", "text": "Directory created"},
                ]},
            ]},
            "timestamp": "2025-01-20T10:05:31Z",
        },
        # 12. Agent turn with nothing but thinking (dropped)
        {
            "type": "assistant",
            "message": {"role": "assistant", "content": [{"type": "thinking", "thinking": "Done."}]},
            "timestamp": "2025-01-20T10:06:00Z",
        },
    ]


def _short_session(text, timestamp):
    return [
        {
            "type": "user",
            "message": {"role": "user", "content": [{"type": "text", "text": text}]},
            "timestamp": timestamp,
        },
        {
            "type": "assistant",
            "message": {"role": "assistant", "content": [{"type": "text", "text": "On it."}]},
            "timestamp": timestamp,
        },
    ]


@pytest.fixture
def tmp_projects_dir(tmp_path, session_entries):
    """Create a synthetic log root with two projects.

    - myapp/session-001.jsonl: the full transcript, started 2025-01-20
    - myapp/session-002.jsonl: short session, started 2025-01-21
    - widget/session-003.jsonl: short session, started 2025-01-19
    - myapp/agent-sub.jsonl: sub-agent log (excluded)
    - myapp/notes.txt and a stray root-level .jsonl (excluded)

    File modification times are deliberately not in start-time order.
    """
    projects = tmp_path / "projects"
    myapp = projects / PROJECT_ID
    widget = projects / OTHER_PROJECT_ID

    _write_jsonl(
        myapp / "session-001.jsonl", session_entries,
        mtime=datetime(2025, 2, 1, tzinfo=timezone.utc),
    )
    _write_jsonl(
        myapp / "session-002.jsonl", _short_session("Write tests for the API", "2025-01-21T09:00:00Z"),
        mtime=datetime(2025, 1, 21, 10, tzinfo=timezone.utc),
    )
    _write_jsonl(
        widget / "session-003.jsonl", _short_session("Fix the widget", "2025-01-19T08:00:00Z"),
        mtime=datetime(2025, 3, 1, tzinfo=timezone.utc),
    )
    _write_jsonl(myapp / "agent-sub.jsonl", _short_session("sub task", "2025-01-22T08:00:00Z"))
    (myapp / "notes.txt").write_text("not a log", encoding="utf-8")
    _write_jsonl(projects / "stray.jsonl", _short_session("stray", "2025-01-23T08:00:00Z"))

    return projects
