# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Per-path cache of file content and provide calls.

This module implements the lazy file index used by the ancestor search:
- Content cache: raw text per path, populated on first read
- Provides cache: provide(...) call texts per path, derived from content
- Explicit invalidation driven by file change/delete notifications

Design Decisions:
- Populate-on-miss, invalidate-on-event, no time-based expiry
- A failed read is cached as "" so unreadable files are not retried on
  every query (they are retried after the next invalidation)
- Reads go through an injectable async reader; the default runs the
  blocking read in a worker thread so several reads can overlap

Concurrency:
- Designed for a single asyncio event loop. Two concurrent misses on the same
  path may both read; last writer wins with identical content.
- Physical reads are bounded by an asyncio.Semaphore.
- invalidate() and clear() bump a generation; a read that started before the
  bump returns its text to the caller but is not cached.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from provide_seeker.models import IndexStatistics
from provide_seeker.text_scanner import find_provide_calls

logger = logging.getLogger(__name__)

# Reader signature: async (filepath: str) -> str, may raise on failure
FileReader = Callable[[str], Awaitable[str]]

# Cheap pre-filter before the regex pass
_PROVIDE_MARKER = "provide"


def _read_text_blocking(filepath: str) -> str:
    with open(filepath, encoding="utf-8") as f:
        return f.read()


async def read_file_text(filepath: str) -> str:
    """Read a file as UTF-8 text without blocking the event loop.

    Raises:
        OSError: If the file cannot be opened or read.
        UnicodeDecodeError: If the file is not valid UTF-8.
    """
    return await asyncio.to_thread(_read_text_blocking, filepath)


class FileIndex:
    """Lazy content and provide-call cache keyed by file path.

    Usage:
        index = FileIndex()
        text = await index.get_content("/ws/src/App.vue")
        calls = await index.get_provides("/ws/src/App.vue")
        index.invalidate("/ws/src/App.vue")
    """

    def __init__(
        self,
        reader: Optional[FileReader] = None,
        max_concurrent_reads: int = 64,
    ) -> None:
        """Initialize file index.

        Args:
            reader: Async callable returning the text of a path. Defaults to
                read_file_text().
            max_concurrent_reads: Upper bound on reads in flight at once.
        """
        self._reader = reader or read_file_text
        self._read_slots = asyncio.Semaphore(max_concurrent_reads)

        self._content: Dict[str, str] = {}
        self._provides: Dict[str, List[str]] = {}

        # Bumped per path by invalidate(), globally by clear()
        self._generations: Dict[str, int] = {}
        self._epoch = 0

        self._stats = IndexStatistics()

        logger.debug(f"FileIndex initialized with max_concurrent_reads={max_concurrent_reads}")

    def _generation(self, filepath: str) -> Tuple[int, int]:
        return self._epoch, self._generations.get(filepath, 0)

    async def get_content(self, filepath: str) -> str:
        """Return the text of a file, reading it on cache miss.

        Any read failure is cached and returned as "". A read overtaken by
        invalidate() is returned but not cached.
        """
        if filepath in self._content:
            self._stats.content_hits += 1
            return self._content[filepath]

        self._stats.content_misses += 1
        generation = self._generation(filepath)
        async with self._read_slots:
            self._stats.file_reads += 1
            try:
                content = await self._reader(filepath)
            except Exception as e:
                logger.debug(f"Read failed for {filepath}, caching empty content: {e}")
                self._stats.failed_reads += 1
                content = ""

        if self._generation(filepath) != generation:
            logger.debug(f"{filepath} invalidated during read, not caching")
            return content

        self._content[filepath] = content
        return content

    async def get_provides(self, filepath: str) -> List[str]:
        """Return the provide(...) call texts of a file.

        Files whose content lacks the word "provide" skip the regex pass.
        """
        if filepath in self._provides:
            self._stats.provides_hits += 1
            return self._provides[filepath]

        self._stats.provides_misses += 1
        generation = self._generation(filepath)
        content = await self.get_content(filepath)
        if _PROVIDE_MARKER not in content:
            calls: List[str] = []
        else:
            calls = find_provide_calls(content)
            logger.debug(f"Found {len(calls)} provide call(s) in {filepath}")

        if self._generation(filepath) == generation:
            self._provides[filepath] = calls
        return calls

    def invalidate(self, filepath: str) -> None:
        """Drop the content and provides entries of a file."""
        self._generations[filepath] = self._generations.get(filepath, 0) + 1
        removed = self._content.pop(filepath, None) is not None
        removed = self._provides.pop(filepath, None) is not None or removed
        if removed:
            logger.debug(f"Invalidated file index entries: {filepath}")

    def clear(self) -> None:
        """Drop every cached entry. Statistics are kept."""
        self._epoch += 1
        self._content.clear()
        self._provides.clear()
        logger.debug("File index cleared")

    def is_cached(self, filepath: str) -> bool:
        """Whether the content of a file is currently cached."""
        return filepath in self._content

    def cached_paths(self) -> List[str]:
        return list(self._content)

    def get_statistics(self) -> IndexStatistics:
        """Return a copy of the counters."""
        return IndexStatistics(**self._stats.to_dict())
