# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""AnalysisSession - explicit owner of the analysis state.

One session holds the file universe and the three caches (content, provides,
importers) and passes them by reference to the resolver. Several sessions can
coexist, e.g. one per workspace or one per test.

Key Responsibilities:
- Enumerate candidate component files of a project
- React to create/change/delete notifications from the watcher
- Answer find_providing_ancestors() queries

Notification semantics:
- create: add to universe, drop the file's own index entries and the importer
  list keyed by its component name
- change: drop the file's own index entries and the importer list keyed by
  its component name; importer lists that merely contain the file are kept
- delete: drop the file's own entries, scrub it from every importer list,
  remove it from the universe

The kept importer lists are a known staleness window: after an edit that adds
or removes an import, lists for the imported component are not recomputed.
Setting strict_importer_invalidation drops all importer lists on create and
change instead.
"""

import asyncio
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from provide_seeker.ancestor_resolver import AncestorResolver
from provide_seeker.config import Config
from provide_seeker.file_index import FileIndex, FileReader
from provide_seeker.ignore_rules import IgnoreRules
from provide_seeker.import_graph import ImportGraphIndex
from provide_seeker.models import AncestorRecord, FileEventKind, IndexStatistics
from provide_seeker.text_scanner import component_name_for

logger = logging.getLogger(__name__)


def enumerate_candidate_files(
    project_root: Union[str, Path],
    glob_pattern: str = "**/*.vue",
    ignore_rules: Optional[IgnoreRules] = None,
) -> List[str]:
    """List component files under a project root.

    Args:
        project_root: Directory to search.
        glob_pattern: Glob relative to project_root.
        ignore_rules: Rules deciding which paths are skipped. Defaults to the
            built-in rules plus the project's .gitignore.

    Returns:
        Sorted absolute paths of matching files.
    """
    root = Path(project_root).resolve()
    if ignore_rules is None:
        ignore_rules = IgnoreRules(root)

    found: List[str] = []
    for path in root.glob(glob_pattern):
        if not path.is_file():
            continue
        if ignore_rules.should_ignore(path):
            continue
        found.append(str(path))
    return sorted(found)


class AnalysisSession:
    """Owns the file universe, the indexes and the resolver of one workspace.

    Usage:
        session = AnalysisSession(project_root="/path/to/app")
        await session.refresh_universe()
        records = await session.find_providing_ancestors("Leaf")
        session.on_change("/path/to/app/src/Root.vue")
    """

    def __init__(
        self,
        project_root: Optional[Union[str, Path]] = None,
        config: Optional[Config] = None,
        reader: Optional[FileReader] = None,
        file_universe: Optional[Iterable[str]] = None,
    ) -> None:
        """Initialize analysis session.

        Args:
            project_root: Workspace root used by refresh_universe(). Defaults
                to the current working directory.
            config: Configuration object. If None, loads from default location.
            reader: Async file reader for the file index (tests inject one).
            file_universe: Initial candidate files; refresh_universe() replaces it.
        """
        if config is None:
            config = Config()
        self.config = config
        self.project_root = Path(project_root or Path.cwd()).resolve()
        # Also handed to the file watcher so both see the same universe
        self.ignore_rules = IgnoreRules(
            self.project_root,
            user_ignore_patterns=[*config.exclude_patterns, *config.ignore_patterns],
        )

        # Shared by reference with the importer index
        self.file_universe: List[str] = list(file_universe or [])

        self.file_index = FileIndex(reader=reader, max_concurrent_reads=config.max_concurrent_reads)
        self.import_graph = ImportGraphIndex(self.file_index, self.file_universe)
        self.resolver = AncestorResolver(self.file_index, self.import_graph)

        logger.info(f"AnalysisSession initialized with project_root={self.project_root}")

    def is_component_file(self, filepath: str) -> bool:
        return Path(filepath).suffix == self.config.component_extension

    async def refresh_universe(self) -> int:
        """Re-enumerate candidate files and replace the universe in place.

        Returns:
            Number of files in the universe.
        """
        paths = await asyncio.to_thread(
            enumerate_candidate_files,
            self.project_root,
            self.config.component_glob,
            self.ignore_rules,
        )
        self.set_file_universe(paths)
        logger.info(f"File universe refreshed: {len(paths)} component file(s)")
        return len(paths)

    def set_file_universe(self, paths: Iterable[str]) -> None:
        """Replace the universe contents, keeping the shared list object."""
        self.file_universe[:] = list(paths)

    def _invalidate_own_entries(self, filepath: str) -> None:
        self.file_index.invalidate(filepath)
        if self.config.strict_importer_invalidation:
            self.import_graph.clear()
        else:
            self.import_graph.invalidate(component_name_for(filepath))

    def on_create(self, filepath: str) -> None:
        """Handle a created component file."""
        if filepath not in self.file_universe:
            self.file_universe.append(filepath)
        self._invalidate_own_entries(filepath)
        logger.debug(f"Created: {filepath}")

    def on_change(self, filepath: str) -> None:
        """Handle a modified component file."""
        self._invalidate_own_entries(filepath)
        logger.debug(f"Changed: {filepath}")

    def on_delete(self, filepath: str) -> None:
        """Handle a deleted component file."""
        self.file_index.invalidate(filepath)
        self.import_graph.invalidate(component_name_for(filepath))
        self.import_graph.remove_file(filepath)
        if filepath in self.file_universe:
            self.file_universe.remove(filepath)
        logger.debug(f"Deleted: {filepath}")

    def handle_file_event(self, kind: str, filepath: str) -> None:
        """Dispatch a FileEventKind notification to its handler.

        Raises:
            ValueError: If kind is not a FileEventKind value.
        """
        handlers = {
            FileEventKind.CREATED: self.on_create,
            FileEventKind.CHANGED: self.on_change,
            FileEventKind.DELETED: self.on_delete,
        }
        if kind not in handlers:
            raise ValueError(f"Unknown file event kind: {kind}")
        handlers[kind](filepath)

    async def find_providing_ancestors(self, component_name: str) -> List[AncestorRecord]:
        """Return the providing ancestors of a component (see AncestorResolver)."""
        return await self.resolver.find_providing_ancestors(component_name)

    async def find_providing_ancestors_for_file(self, filepath: str) -> List[AncestorRecord]:
        """Return the providing ancestors of the component defined by a file.

        Files without the component extension have no ancestors.
        """
        if not self.is_component_file(filepath):
            logger.debug(f"Not a component file, skipping ancestor search: {filepath}")
            return []
        return await self.find_providing_ancestors(component_name_for(filepath))

    def clear(self) -> None:
        """Drop every cached entry; the universe is kept."""
        self.file_index.clear()
        self.import_graph.clear()
        logger.info("AnalysisSession caches cleared")

    def get_statistics(self) -> Dict[str, object]:
        """Summarize cache counters and sizes."""
        stats: IndexStatistics = self.file_index.get_statistics().merged(
            self.import_graph.get_statistics()
        )
        result: Dict[str, object] = dict(stats.to_dict())
        result["universe_size"] = len(self.file_universe)
        result["cached_files"] = len(self.file_index.cached_paths())
        result["cached_components"] = len(self.import_graph.cached_components())
        return result
