"""Per-log-file persistence of analysis results.

Each log file maps to one JSON file named after the SHA-256 of its resolved
path. Writes go to a temporary file in the same directory and are moved
into place with os.replace, so readers never see a partial record.
"""

import hashlib
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from .config import get_analysis_cache_path
from .core import AnalysisRecord, AnalysisSuggestion
from .errors import AnalysisCacheError
from .parser import parse_timestamp

logger = logging.getLogger(__name__)


class AnalysisCache:
    """Stores the most recent AnalysisRecord for each log file."""

    def __init__(self, directory: Optional[Path] = None):
        self.directory = directory if directory is not None else get_analysis_cache_path()

    def slot_for(self, log_path: Path) -> Path:
        """Return the cache file that holds the record for ``log_path``."""
        key = hashlib.sha256(_canonical_path(log_path).encode("utf-8")).hexdigest()
        return self.directory / f"{key}.json"

    def save(self, suggestions: Sequence[AnalysisSuggestion], log_path: Path) -> AnalysisRecord:
        """Replace the record for ``log_path``. Raises AnalysisCacheError on failure."""
        record = AnalysisRecord(
            source_path=_canonical_path(log_path),
            analyzed_at=datetime.now(timezone.utc),
            suggestions=list(suggestions),
        )
        slot = self.slot_for(log_path)
        data = {
            "sessionFilePath": record.source_path,
            "analyzedAt": record.analyzed_at.isoformat(),
            "suggestions": [s.to_dict() for s in record.suggestions],
        }

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            _write_json_atomic(slot, data)
        except OSError as e:
            raise AnalysisCacheError(log_path, str(e)) from e

        logger.debug("Saved %d suggestions for %s", len(record.suggestions), log_path)
        return record

    def load(self, log_path: Path) -> Optional[AnalysisRecord]:
        """Return the stored record, or None if absent or unreadable."""
        slot = self.slot_for(log_path)
        try:
            data = json.loads(slot.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
            logger.warning("Ignoring unreadable analysis record %s: %s", slot, e)
            return None

        try:
            return _record_from_dict(data)
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning("Ignoring malformed analysis record %s: %s", slot, e)
            return None

    def exists(self, log_path: Path) -> bool:
        return self.slot_for(log_path).is_file()

    def delete(self, log_path: Path) -> None:
        """Remove the record for ``log_path``; absent records are fine."""
        try:
            self.slot_for(log_path).unlink(missing_ok=True)
        except OSError as e:
            raise AnalysisCacheError(log_path, str(e)) from e


def _canonical_path(path: Path) -> str:
    return str(Path(path).expanduser().resolve())


def _record_from_dict(data: dict) -> AnalysisRecord:
    analyzed_at = parse_timestamp(data["analyzedAt"])
    if analyzed_at is None:
        raise ValueError(f"bad analyzedAt: {data['analyzedAt']!r}")
    return AnalysisRecord(
        source_path=str(data["sessionFilePath"]),
        analyzed_at=analyzed_at,
        suggestions=[AnalysisSuggestion.from_dict(item) for item in data["suggestions"]],
    )


def _write_json_atomic(filename: Path, data: dict) -> None:
    """Write JSON atomically via temp file + rename."""
    fd, temp_path = tempfile.mkstemp(dir=filename.parent, prefix=f".tmp_{filename.stem}_", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, filename)
    except BaseException:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise
