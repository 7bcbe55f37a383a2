"""Platform-aware path resolution and tunables."""

import os
import sys
from pathlib import Path

DEFAULT_PAGE_SIZE = 50
DEFAULT_MAX_WORKERS = 8

# Bytes read from the head of a log file when looking for its start time
SUMMARY_WINDOW_BYTES = 10_000

LOG_SUFFIX = ".jsonl"
SUBAGENT_PREFIX = "agent-"


def get_projects_path() -> Path:
    """Return the root directory holding one subdirectory per project."""
    env = os.environ.get("AGENT_LOG_SCANNER_PROJECTS_PATH")
    if env:
        return Path(env).expanduser()

    return Path.home() / ".claude" / "projects"


def get_analysis_cache_path() -> Path:
    """Return the directory where analysis records are stored."""
    env = os.environ.get("AGENT_LOG_SCANNER_CACHE_PATH")
    if env:
        return Path(env).expanduser()

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "AgentLogScanner" / "analyses"
    elif sys.platform == "win32":
        return Path(os.environ.get("APPDATA", "")) / "AgentLogScanner" / "analyses"
    else:  # Linux
        data_home = os.environ.get("XDG_DATA_HOME")
        base = Path(data_home) if data_home else Path.home() / ".local" / "share"
        return base / "agent-log-scanner" / "analyses"


def get_global_notes_path() -> Path:
    """Return the path to the global note file."""
    env = os.environ.get("AGENT_LOG_SCANNER_GLOBAL_NOTES")
    if env:
        return Path(env).expanduser()

    return Path.home() / ".claude" / "CLAUDE.md"


def get_page_size() -> int:
    """Return the catalog page size, honouring a positive integer override."""
    env = os.environ.get("AGENT_LOG_SCANNER_PAGE_SIZE")
    if env:
        try:
            value = int(env)
        except ValueError:
            return DEFAULT_PAGE_SIZE
        if value > 0:
            return value
    return DEFAULT_PAGE_SIZE
