"""Paginated, concurrently loaded index of discovered sessions.

The catalog owns the summary list. Per-file parsing runs in worker threads
that only return results; merging and sorting happen in the coroutine that
holds the page lock, so the list has a single writer. Readers get an
immutable snapshot.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from .config import DEFAULT_MAX_WORKERS, get_page_size, get_projects_path
from .core import LogFile, Session, SessionSummary
from .discovery import discover_log_files
from .parser import load_messages, summarize_log_file

logger = logging.getLogger(__name__)


class SessionCatalog:
    """In-memory index of sessions under a log root.

    ``refresh()`` rescans the file system and loads the first page;
    ``load_more()`` loads the next page. A file is parsed at most once per
    scan, whether or not it produced a summary.
    """

    def __init__(
        self,
        root: Optional[Path] = None,
        page_size: Optional[int] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        if page_size is None:
            page_size = get_page_size()
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        if max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {max_workers}")

        self.root = root if root is not None else get_projects_path()
        self.page_size = page_size
        self.error: Optional[str] = None

        self._files: list[LogFile] = []
        self._loaded_count = 0
        self._summaries: tuple[SessionSummary, ...] = ()
        self._scanning = False
        self._paging = False
        self._generation = 0
        self._page_lock = asyncio.Lock()
        self._workers = asyncio.Semaphore(max_workers)

    # ── Read-only views ──────────────────────────────────────────────

    @property
    def summaries(self) -> tuple[SessionSummary, ...]:
        return self._summaries

    @property
    def projects(self) -> list[str]:
        """Sorted unique project names among the loaded summaries."""
        return sorted({s.project_name for s in self._summaries})

    @property
    def has_more(self) -> bool:
        return self._loaded_count < len(self._files)

    @property
    def loaded_count(self) -> int:
        return self._loaded_count

    @property
    def total_files(self) -> int:
        return len(self._files)

    @property
    def is_scanning(self) -> bool:
        return self._scanning

    @property
    def is_paging(self) -> bool:
        return self._paging

    def filtered_by_project(self, project_name: Optional[str] = None) -> list[SessionSummary]:
        """Return loaded summaries for one project, or all of them."""
        summaries = self._summaries
        if project_name is None:
            return list(summaries)
        return [s for s in summaries if s.project_name == project_name]

    # ── Operations ───────────────────────────────────────────────────

    async def refresh(self) -> None:
        """Rediscover files, reset the index and load the first page.

        A call made while a scan is running returns immediately. Discovery
        failures are recorded in ``error`` rather than raised.
        """
        if self._scanning:
            return

        self._scanning = True
        self._generation += 1
        generation = self._generation
        self.error = None
        self._summaries = ()
        self._files = []
        self._loaded_count = 0

        try:
            try:
                files = await asyncio.to_thread(discover_log_files, self.root)
            except OSError as e:
                logger.error("Failed to discover sessions under %s: %s", self.root, e)
                self.error = str(e)
                return

            async with self._page_lock:
                if generation != self._generation:
                    return
                self._files = files
                logger.info("Discovered %d session files under %s", len(files), self.root)
                await self._load_page(generation)
        finally:
            self._scanning = False

    async def load_more(self) -> None:
        """Load the next page of files. A no-op once every file is covered."""
        async with self._page_lock:
            await self._load_page(self._generation)

    async def load_full_session(self, summary: SessionSummary) -> Session:
        """Parse the complete transcript behind ``summary``.

        Raises SessionLoadError if the file cannot be read; the catalog
        itself is left untouched.
        """
        messages = await asyncio.to_thread(load_messages, summary.source_path)
        return Session(
            id=summary.id,
            project_path=summary.project_identifier,
            messages=messages,
        )

    # ── Private helpers ──────────────────────────────────────────────

    async def _load_page(self, generation: int) -> None:
        """Parse one page of files and merge the results. Caller holds the page lock."""
        start = self._loaded_count
        end = min(start + self.page_size, len(self._files))
        if start >= end:
            return

        batch = self._files[start:end]
        self._paging = True
        try:
            results = await asyncio.gather(
                *(self._summarize(log_file, generation) for log_file in batch)
            )
        finally:
            self._paging = False

        if generation != self._generation:
            logger.debug("Discarding %d results from a superseded scan", len(results))
            return

        self._merge([r for r in results if r is not None])
        # Advance past the whole slice, including files that failed to parse
        self._loaded_count = end

    async def _summarize(self, log_file: LogFile, generation: int) -> Optional[SessionSummary]:
        async with self._workers:
            if generation != self._generation:
                return None
            return await asyncio.to_thread(summarize_log_file, log_file)

    def _merge(self, new_summaries: list[SessionSummary]) -> None:
        merged = list(self._summaries)
        seen = {s.source_path for s in merged}
        for summary in new_summaries:
            if summary.source_path in seen:
                continue
            seen.add(summary.source_path)
            merged.append(summary)

        merged.sort(key=lambda s: s.timestamp, reverse=True)
        self._summaries = tuple(merged)
