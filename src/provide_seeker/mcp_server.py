# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""MCP Server Protocol Layer for provide-seeker.

This module contains ZERO business logic. Ancestor search, caching and
invalidation live in AnalysisSession; display formatting lives in
hover_formatter.
"""

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from mcp.server.fastmcp import Context, FastMCP
from mcp.server.session import ServerSession

from provide_seeker.config import Config, ConfigurationError
from provide_seeker.file_watcher import FileWatcher
from provide_seeker.hover_formatter import build_display_payload
from provide_seeker.logging_setup import setup_logging
from provide_seeker.models import FileEventKind
from provide_seeker.session import AnalysisSession
from provide_seeker.text_scanner import component_name_for, parse_provide_calls

logger = logging.getLogger(__name__)

SERVER_NAME = "provide-seeker"

# Maximum filepath length to prevent DoS
_MAX_FILEPATH_LENGTH = 4096


class ProvideSeekerMCPServer:
    """MCP Protocol Layer for provide-seeker.

    Responsibilities:
    - Initialize MCP server and register tools
    - Start the session lazily on the server's event loop (universe
      enumeration and file watcher)
    - Translate tool calls to session calls and format the results
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        session: Optional[AnalysisSession] = None,
        project_root: Optional[Path] = None,
        watcher: Optional[FileWatcher] = None,
    ):
        """Initialize MCP server.

        Args:
            config: Configuration object. If None, loads from default location.
            session: Analysis session. If None, creates one for project_root.
            project_root: Workspace to analyze. Defaults to the current directory.
            watcher: File watcher. If None and the watcher is enabled, one is
                created for the session's project root.
        """
        if config is None:
            config = Config()
        self.config = config

        if session is None:
            session = AnalysisSession(project_root=project_root, config=config)
        self.session = session

        if watcher is None and config.enable_file_watcher:
            watcher = FileWatcher(
                project_root=str(session.project_root),
                component_extension=config.component_extension,
                ignore_rules=session.ignore_rules,
            )
        self.watcher = watcher
        if self.watcher is not None:
            self.watcher.register_callback(FileEventKind.CREATED, self.session.on_create)
            self.watcher.register_callback(FileEventKind.CHANGED, self.session.on_change)
            self.watcher.register_callback(FileEventKind.DELETED, self.session.on_delete)

        self._started = False
        self._start_lock = asyncio.Lock()

        self.mcp = FastMCP(name=SERVER_NAME)
        self._register_tools()

        logger.info("ProvideSeekerMCPServer initialized")

    async def ensure_started(self) -> None:
        """Enumerate the file universe and start the watcher, once."""
        async with self._start_lock:
            if self._started:
                return
            await self.session.refresh_universe()
            if self.watcher is not None and not self.watcher.is_running():
                self.watcher.start(loop=asyncio.get_running_loop())
            self._started = True

    @staticmethod
    def _validate_filepath(file_path: str) -> None:
        """Reject empty or oversized paths.

        Raises:
            ValueError: If the path is empty or too long.
        """
        if not file_path or not file_path.strip():
            raise ValueError("file_path must not be empty")
        if len(file_path) > _MAX_FILEPATH_LENGTH:
            raise ValueError(f"file_path exceeds {_MAX_FILEPATH_LENGTH} characters")

    async def find_providing_ancestors(self, file_path: str) -> Dict[str, Any]:
        """Resolve the providing ancestors of a component file.

        Returns:
            Dictionary with file_path, component, ancestors and display.

        Raises:
            ValueError: If file_path is empty or too long.
        """
        self._validate_filepath(file_path)
        await self.ensure_started()

        resolved = str(Path(file_path).expanduser().resolve())
        records = await self.session.find_providing_ancestors_for_file(resolved)

        ancestors = []
        for record in records:
            data = record.to_dict()
            data["entries"] = [list(entry) for entry in parse_provide_calls(record.provides)]
            ancestors.append(data)

        return {
            "file_path": resolved,
            "component": component_name_for(resolved),
            "ancestors": ancestors,
            "display": build_display_payload(records),
        }

    def _register_tools(self) -> None:
        """Register MCP tools with the server.

        Registers:
        - find_providing_ancestors: Ancestors providing values to a component
        - get_index_statistics: Cache counters of the analysis session
        """

        @self.mcp.tool()
        async def find_providing_ancestors(
            file_path: str,
            ctx: Context[ServerSession, None],
        ) -> Dict[str, Any]:
            """Find ancestor components that provide() values to a component.

            Walks the component import graph upward from the given file and
            reports every ancestor file containing provide(...) calls.

            Args:
                file_path: Absolute or relative path to the component file
                ctx: MCP context for logging and progress

            Returns:
                Dictionary with:
                - file_path: The resolved path
                - component: Component name derived from the file name
                - ancestors: List of {name, source, provides, entries}
                - display: Indicator/hover payload, or null if none
            """
            await ctx.info(f"Finding providing ancestors for: {file_path}")

            try:
                result = await self.find_providing_ancestors(file_path)
                await ctx.info(f"Found {len(result['ancestors'])} providing ancestor(s)")
                return result
            except ValueError as e:
                await ctx.error(f"Invalid request: {e}")
                raise
            except Exception as e:
                await ctx.error(f"Unexpected error resolving {file_path}: {e}")
                raise

        @self.mcp.tool()
        async def get_index_statistics(
            ctx: Context[ServerSession, None],
        ) -> Dict[str, Any]:
            """Return cache hit/miss counters and sizes of the analysis session.

            Args:
                ctx: MCP context for logging and progress
            """
            await ctx.info("Collecting index statistics")
            return self.session.get_statistics()

        logger.info("MCP tools registered: find_providing_ancestors, get_index_statistics")

    def run(self, transport: str = "stdio") -> None:
        """Run the MCP server.

        Args:
            transport: One of "stdio" (default), "streamable-http" or "sse".
        """
        logger.info(f"Starting MCP server with {transport} transport")
        self.mcp.run(transport=transport)  # type: ignore[arg-type]

    def shutdown(self) -> None:
        """Stop the watcher and drop the caches."""
        logger.info("Shutting down MCP server")
        if self.watcher is not None:
            self.watcher.stop()
        self.session.clear()


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="provide-seeker MCP Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=None,
        help="Workspace to analyze. Default: current directory",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the YAML configuration file. Default: ./.provide_seeker.yml",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Write structured JSON logs to this directory",
    )
    parser.add_argument(
        "--transport",
        type=str,
        choices=["stdio", "streamable-http", "sse"],
        default="stdio",
        help="Transport type for MCP server. Default: stdio",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list] = None) -> None:
    """Main entry point for MCP server.

    Raises:
        ConfigurationError: If an explicitly given config file does not exist.
    """
    args = parse_args(argv)

    if args.log_dir is not None:
        setup_logging(log_dir=args.log_dir)
    else:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    if args.config is not None and not args.config.exists():
        raise ConfigurationError(f"Configuration file not found: {args.config}")

    config = Config(config_path=args.config)
    server = ProvideSeekerMCPServer(config=config, project_root=args.project_root)
    logger.info(f"Starting MCP server for project_root={server.session.project_root}")
    try:
        server.run(transport=args.transport)
    finally:
        server.shutdown()


if __name__ == "__main__":
    main()
