"""Exceptions surfaced to callers.

Everything below a full-session load or a cache write recovers locally
(skip and continue); these are the failures that do reach the caller.
"""

from pathlib import Path


class ScannerError(Exception):
    """Base class for agent-log-scanner errors."""


class SessionLoadError(ScannerError):
    """A transcript could not be read or decoded as text."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Failed to load session {path}: {reason}")


class AnalysisCacheError(ScannerError):
    """An analysis record could not be written or removed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Analysis cache error for {path}: {reason}")


class AnalysisDecodeError(ScannerError):
    """A provider response did not contain a JSON array of suggestions."""
