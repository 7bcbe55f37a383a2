"""Read and append the global and per-project CLAUDE.md note files."""

import logging
from pathlib import Path
from typing import Optional

from .config import get_global_notes_path
from .core import AnalysisSuggestion, Target, decode_project_path

logger = logging.getLogger(__name__)

NOTES_FILENAME = "CLAUDE.md"
NEW_FILE_HEADER = "# CLAUDE.md\n\nThis file contains instructions for Claude Code.\n"


class NoteFiles:
    """Plain-text note files. Contents are never interpreted here."""

    def __init__(self, global_path: Optional[Path] = None):
        self.global_path = global_path if global_path is not None else get_global_notes_path()

    def project_path(self, project_identifier: str) -> Path:
        return Path(decode_project_path(project_identifier)) / NOTES_FILENAME

    def read_global(self) -> Optional[str]:
        return _read(self.global_path)

    def read_project(self, project_identifier: str) -> Optional[str]:
        return _read(self.project_path(project_identifier))

    def append_global(self, content: str) -> None:
        _append(self.global_path, content)

    def append_project(self, project_identifier: str, content: str) -> None:
        _append(self.project_path(project_identifier), content)

    def apply(self, suggestion: AnalysisSuggestion, project_identifier: str) -> Path:
        """Append a suggestion to the note file its target names. Returns that file."""
        if suggestion.target is Target.GLOBAL:
            self.append_global(suggestion.suggestion)
            return self.global_path
        self.append_project(project_identifier, suggestion.suggestion)
        return self.project_path(project_identifier)


def _read(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read %s: %s", path, e)
        return None


def _append(path: Path, content: str) -> None:
    formatted = "\n\n" + content
    if path.exists():
        with path.open("a", encoding="utf-8") as f:
            f.write(formatted)
    else:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(NEW_FILE_HEADER + formatted, encoding="utf-8")
