# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Depth-first search for ancestor components that provide values.

Starting from a component name, the resolver walks "importer" edges upward:
every file importing the current component is an ancestor, and its own
component name becomes the next node. Files with at least one provide(...)
call are reported as AncestorRecords.

Traversal:
- Recursive (depth-first) structure, fanned out with asyncio.gather at each
  level so the reads of sibling importers overlap
- Per-call visited set keyed by file path guards against cycles and diamonds
- Check-and-insert on the visited set has no await in between, which makes it
  atomic under the single-threaded event loop

Result order is DFS visitation order and is not deterministic across
concurrent branches; compare results as sets unless the graph is a chain.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Set

from provide_seeker.file_index import FileIndex
from provide_seeker.import_graph import ImportGraphIndex
from provide_seeker.models import AncestorRecord
from provide_seeker.text_scanner import component_name_for

logger = logging.getLogger(__name__)


class AncestorResolver:
    """Finds every distinct ancestor file that contains a provide call."""

    def __init__(self, file_index: FileIndex, import_graph: ImportGraphIndex) -> None:
        self._file_index = file_index
        self._import_graph = import_graph

    async def find_providing_ancestors(self, component_name: str) -> List[AncestorRecord]:
        """Collect the providing ancestors of a component.

        Args:
            component_name: Base name (without extension) of the component.

        Returns:
            One AncestorRecord per visited ancestor file with provide calls.
        """
        visited: Set[str] = set()
        records: List[AncestorRecord] = []
        await self._explore(component_name, visited, records)

        logger.debug(
            f"Ancestor search for {component_name}: visited {len(visited)} file(s), "
            f"{len(records)} providing"
        )
        return records

    async def _explore(
        self, component_name: str, visited: Set[str], records: List[AncestorRecord]
    ) -> None:
        importers = await self._import_graph.get_importers(component_name)
        await asyncio.gather(*(self._visit(path, visited, records) for path in importers))

    async def _visit(self, filepath: str, visited: Set[str], records: List[AncestorRecord]) -> None:
        if filepath in visited:
            return
        visited.add(filepath)

        provides = await self._file_index.get_provides(filepath)
        if provides:
            records.append(
                AncestorRecord(name=Path(filepath).name, source=filepath, provides=list(provides))
            )

        await self._explore(component_name_for(filepath), visited, records)
