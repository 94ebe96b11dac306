# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""provide-seeker: find ancestor components that provide() values."""

from .ancestor_resolver import AncestorResolver
from .config import Config, ConfigurationError
from .file_index import FileIndex, read_file_text
from .file_watcher import FileWatcher
from .hover_formatter import build_display_payload, format_hover_markdown
from .ignore_rules import IgnoreRules
from .import_graph import ImportGraphIndex
from .models import (
    NON_VALID_PROVIDE,
    AncestorRecord,
    FileEventKind,
    IndexStatistics,
    ProvideEntry,
)
from .session import AnalysisSession, enumerate_candidate_files
from .text_scanner import (
    extract_script_body,
    find_provide_calls,
    imports_component,
    parse_key_value_pairs,
    parse_provide_argument,
)

__version__ = "0.1.0"

__all__ = [
    "AncestorResolver",
    "AnalysisSession",
    "enumerate_candidate_files",
    "Config",
    "ConfigurationError",
    "FileIndex",
    "read_file_text",
    "FileWatcher",
    "IgnoreRules",
    "ImportGraphIndex",
    "AncestorRecord",
    "FileEventKind",
    "IndexStatistics",
    "ProvideEntry",
    "NON_VALID_PROVIDE",
    "build_display_payload",
    "format_hover_markdown",
    "extract_script_body",
    "find_provide_calls",
    "imports_component",
    "parse_key_value_pairs",
    "parse_provide_argument",
]

# Conditional import for MCP server (requires Python 3.10+ and mcp package)
try:
    from .mcp_server import ProvideSeekerMCPServer

    __all__.append("ProvideSeekerMCPServer")
except ImportError:
    # MCP package not available
    pass
