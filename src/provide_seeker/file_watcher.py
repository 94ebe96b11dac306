# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""File system watcher feeding create/change/delete notifications.

This module implements the watcher side of cache invalidation:
- Watchdog library for cross-platform file watching
- Only component files (configured extension) are forwarded
- Ignore decisions are delegated to IgnoreRules, the same rules file
  enumeration uses
- Candidate callbacks per FileEventKind (created, changed, deleted)

Design Decisions:
- Moves are reported as deleted(src) + created(dest)
- When an asyncio loop is bound via start(loop=...), callbacks are scheduled
  onto that loop with call_soon_threadsafe, so the caches are only mutated
  from the event loop thread
- Without a bound loop, callbacks run synchronously on the watcher thread

Known Limitations:
- Symlinks: Symbolic links are followed by watchdog; no validation that resolved
  paths stay within project_root
- Error handling: No automatic restart/fallback on watcher failure
"""

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional

from watchdog.events import FileMovedEvent, FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from provide_seeker.ignore_rules import IgnoreRules
from provide_seeker.models import FileEventKind

if TYPE_CHECKING:
    from watchdog.observers.api import BaseObserver

logger = logging.getLogger(__name__)

# Callback signature: (filepath: str) -> None
FileEventCallback = Callable[[str], None]


class FileWatcher:
    """Component file watcher.

    Usage:
        watcher = FileWatcher(project_root="/path/to/app", ignore_rules=session.ignore_rules)
        watcher.register_callback(FileEventKind.CHANGED, session.on_change)
        watcher.start(loop=asyncio.get_running_loop())
        # ...
        watcher.stop()
    """

    def __init__(
        self,
        project_root: str,
        gitignore_path: Optional[str] = None,
        user_ignore_patterns: Optional[Iterable[str]] = None,
        component_extension: str = ".vue",
        ignore_rules: Optional[IgnoreRules] = None,
    ):
        """Initialize FileWatcher.

        Args:
            project_root: Root directory to watch
            gitignore_path: Path to .gitignore file, used when ignore_rules is None
            user_ignore_patterns: Configured ignore patterns, used when ignore_rules is None
            component_extension: Extension of files to forward, including the dot
            ignore_rules: Rules shared with file enumeration
        """
        self.project_root = Path(project_root).resolve()
        self.component_extension = component_extension
        self.ignore_rules = ignore_rules or IgnoreRules(
            self.project_root,
            gitignore_path=gitignore_path,
            user_ignore_patterns=user_ignore_patterns,
        )

        self._callbacks: Dict[str, List[FileEventCallback]] = {
            FileEventKind.CREATED: [],
            FileEventKind.CHANGED: [],
            FileEventKind.DELETED: [],
        }
        self._loop: Optional[asyncio.AbstractEventLoop] = None

        self._observer: Optional[BaseObserver] = None
        self._event_handler = _FileEventHandler(self)

        logger.info(f"FileWatcher initialized for {self.project_root}")

    def should_ignore(self, file_path: str) -> bool:
        return self.ignore_rules.should_ignore(file_path)

    def is_component_file(self, file_path: str) -> bool:
        return Path(file_path).suffix == self.component_extension

    def register_callback(self, kind: str, callback: FileEventCallback) -> None:
        """Register a callback for one kind of file event.

        Callbacks should return quickly; exceptions are logged and swallowed so
        one failing callback doesn't prevent the others from running.

        Raises:
            ValueError: If kind is not a FileEventKind value.
        """
        if kind not in self._callbacks:
            raise ValueError(f"Unknown file event kind: {kind}")
        if callback not in self._callbacks[kind]:
            self._callbacks[kind].append(callback)
            logger.debug(f"Registered {kind} callback: {callback}")

    def unregister_callback(self, kind: str, callback: FileEventCallback) -> None:
        """Unregister a previously registered callback."""
        if callback in self._callbacks.get(kind, []):
            self._callbacks[kind].remove(callback)
            logger.debug(f"Unregistered {kind} callback: {callback}")

    def _run_callbacks(self, kind: str, file_path: str) -> None:
        for callback in list(self._callbacks[kind]):
            try:
                callback(file_path)
            except Exception as e:
                logger.error(f"File event callback failed for {kind} {file_path}: {e}")

    def notify(self, kind: str, file_path: str) -> None:
        """Deliver an event to the callbacks, on the bound loop if there is one."""
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._run_callbacks, kind, file_path)
        else:
            self._run_callbacks(kind, file_path)

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Start watching the file system.

        Args:
            loop: Event loop the callbacks should run on. If None, callbacks run
                on the watcher thread.

        Raises:
            RuntimeError: If watcher is already running
        """
        if self._observer is not None and self._observer.is_alive():
            raise RuntimeError("FileWatcher is already running")

        self._loop = loop
        self._observer = Observer()
        self._observer.schedule(  # type: ignore  # watchdog types vary by version
            self._event_handler, str(self.project_root), recursive=True
        )
        self._observer.start()  # type: ignore  # watchdog types vary by version

        logger.info(f"FileWatcher started, monitoring {self.project_root}")

    def stop(self) -> None:
        """Stop watching file system.

        Blocks until observer thread terminates (with timeout).
        """
        if self._observer is not None and self._observer.is_alive():
            self._observer.stop()  # type: ignore  # watchdog types vary by version
            self._observer.join(timeout=5.0)
            logger.info("FileWatcher stopped")
        self._loop = None

    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()


class _FileEventHandler(FileSystemEventHandler):
    """Internal event handler for watchdog.

    Filters events and forwards them to FileWatcher.notify().
    """

    def __init__(self, watcher: FileWatcher):
        super().__init__()
        self.watcher = watcher

    def _accepts(self, file_path: str) -> bool:
        return self.watcher.is_component_file(file_path) and not self.watcher.should_ignore(
            file_path
        )

    def _handle_event(self, event: FileSystemEvent, kind: str) -> None:
        if event.is_directory:
            return

        # Convert path from Union[bytes, str] to str
        file_path = str(event.src_path)
        if not self._accepts(file_path):
            return

        logger.debug(f"Event: {kind} - {file_path}")
        self.watcher.notify(kind, file_path)

    def on_created(self, event: FileSystemEvent) -> None:
        self._handle_event(event, FileEventKind.CREATED)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._handle_event(event, FileEventKind.CHANGED)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._handle_event(event, FileEventKind.DELETED)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle file move/rename events as delete(src) + create(dest)."""
        if event.is_directory:
            return

        if not isinstance(event, FileMovedEvent):
            return

        src_path = str(event.src_path)
        dest_path = str(event.dest_path)

        if self._accepts(src_path):
            logger.debug(f"Event: moved_from - {src_path}")
            self.watcher.notify(FileEventKind.DELETED, src_path)

        if self._accepts(dest_path):
            logger.debug(f"Event: moved_to - {dest_path}")
            self.watcher.notify(FileEventKind.CREATED, dest_path)
