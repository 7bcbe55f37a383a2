"""Find transcript files under the log root.

Layout: <root>/<project-dir>/<session>.jsonl. Files whose name starts with
the sub-agent prefix are child logs and are not listed.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

from .config import LOG_SUFFIX, SUBAGENT_PREFIX
from .core import LogFile

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def discover_log_files(root: Path) -> list[LogFile]:
    """Return eligible log files under ``root``, newest first.

    A missing root yields an empty list. An unreadable root raises OSError;
    an unreadable project directory is logged and skipped.
    """
    if not root.is_dir():
        logger.info("Log root not found: %s", root)
        return []

    log_files = []
    for project_dir in root.iterdir():
        if project_dir.name.startswith(".") or not project_dir.is_dir():
            continue

        try:
            entries = list(project_dir.iterdir())
        except OSError as e:
            logger.warning("Failed to list %s: %s", project_dir, e)
            continue

        for entry in entries:
            if _is_eligible(entry):
                log_files.append(log_file_for(entry))

    log_files.sort(key=lambda f: f.modified or _OLDEST, reverse=True)
    return log_files


def log_file_for(path: Path) -> LogFile:
    """Build a LogFile for ``path``, reading its modification time if possible."""
    path = path.resolve()
    try:
        modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    except OSError:
        modified = None
    return LogFile(path=path, modified=modified)


def _is_eligible(path: Path) -> bool:
    name = path.name
    if name.startswith(".") or name.startswith(SUBAGENT_PREFIX):
        return False
    return path.suffix == LOG_SUFFIX and path.is_file()
