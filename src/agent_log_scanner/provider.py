"""Abstract base class for external analysis providers."""

from abc import ABC, abstractmethod


class AnalysisProvider(ABC):
    """Base class for suggestion generators.

    A provider takes a fully rendered prompt (transcript, tool-usage summary
    and note-file context) and returns the raw model output, which is
    expected to contain a JSON array of suggestion objects. Running the
    underlying CLI or service is the provider's business.
    """

    name: str  # e.g. "claude", "codex"

    @abstractmethod
    def is_available(self) -> bool:
        """Return True if this provider can be used on this machine."""
        ...

    @abstractmethod
    def complete(self, prompt: str) -> str:
        """Return the raw response text for ``prompt``."""
        ...
