# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Importer index: which files import a given component.

The import graph is never materialized. An edge from component X to file F
exists when F's script imports X; the index answers "importers of X" on demand
by scanning the file universe and caches the answer per component name.

Invalidation:
- invalidate(name): drop one component's cached importer list
- remove_file(path): scrub a deleted file from every cached list, since it
  may be a member of lists stored under other component names

Known Limitations:
- Keyed by bare component name: same-stem files in different directories
  share one node.
- Importer lists are not recomputed when an importer's own import statements
  change; only the entry keyed by the changed file's name is dropped.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from provide_seeker.file_index import FileIndex
from provide_seeker.models import IndexStatistics
from provide_seeker.text_scanner import imports_component

logger = logging.getLogger(__name__)


class ImportGraphIndex:
    """Cache mapping component names to the files that import them.

    The file universe is owned by the caller and shared by reference, so
    additions and removals made by the session are seen on the next miss.
    """

    def __init__(self, file_index: FileIndex, file_universe: List[str]) -> None:
        """Initialize importer index.

        Args:
            file_index: Content source for the scanned files.
            file_universe: Mutable list of candidate component paths.
        """
        self._file_index = file_index
        self._file_universe = file_universe
        self._parents: Dict[str, List[str]] = {}
        # Bumped by every invalidation; a scan overtaken by one is not cached
        self._epoch = 0
        self._stats = IndexStatistics()

    async def _importer_or_none(self, filepath: str, component_name: str) -> Optional[str]:
        content = await self._file_index.get_content(filepath)
        return filepath if imports_component(content, component_name) else None

    async def get_importers(self, component_name: str) -> List[str]:
        """Return every file whose script imports ``component_name``.

        Files are scanned concurrently; the result keeps the universe order.
        The returned list is a copy.
        """
        if component_name in self._parents:
            self._stats.importer_hits += 1
            return list(self._parents[component_name])

        self._stats.importer_misses += 1
        epoch = self._epoch
        # Snapshot: the universe may change while reads are in flight
        candidates = list(self._file_universe)
        results = await asyncio.gather(
            *(self._importer_or_none(path, component_name) for path in candidates)
        )
        importers = [path for path in results if path is not None]

        if self._epoch != epoch:
            current = set(self._file_universe)
            importers = [path for path in importers if path in current]
            logger.debug(f"Importers of {component_name} invalidated during scan, not caching")
            return importers

        self._parents[component_name] = importers
        logger.debug(
            f"Importers of {component_name}: {len(importers)} of {len(candidates)} files"
        )
        return list(importers)

    def invalidate(self, component_name: str) -> None:
        """Drop the cached importer list of one component."""
        self._epoch += 1
        if self._parents.pop(component_name, None) is not None:
            logger.debug(f"Invalidated importer list: {component_name}")

    def remove_file(self, filepath: str) -> None:
        """Scrub a file from the importer lists of every component."""
        self._epoch += 1
        for component_name, importers in self._parents.items():
            if filepath in importers:
                self._parents[component_name] = [p for p in importers if p != filepath]
                logger.debug(f"Removed {filepath} from importers of {component_name}")

    def clear(self) -> None:
        self._epoch += 1
        self._parents.clear()

    def cached_components(self) -> List[str]:
        return list(self._parents)

    def get_statistics(self) -> IndexStatistics:
        """Return a copy of the counters."""
        return IndexStatistics(**self._stats.to_dict())
