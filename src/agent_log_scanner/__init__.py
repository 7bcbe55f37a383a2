"""Ingest AI coding agent transcript logs into typed sessions."""

__version__ = "0.1.0"
