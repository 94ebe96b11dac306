# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Core data models for provide-seeker.

This module defines the data structures shared by the scanner, the indexes
and the resolver:
- ProvideEntry: One (key, value) pair recovered from a provide(...) call
- NON_VALID_PROVIDE: Sentinel entry for provide calls that could not be parsed
- AncestorRecord: An ancestor file that provides at least one value
- IndexStatistics: Hit/miss and read counters for the analysis caches
- FileEventKind: Enum-like class for file system notification kinds

All models serialize to JSON-compatible primitives.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple

NON_VALID_PROVIDE_TEXT = "(Non-valid provide syntax found)"


class ProvideEntry(NamedTuple):
    """Ordered (key, value) pair parsed from a provide(...) argument.

    A NamedTuple so entries compare equal to plain ``(key, value)`` tuples.
    """

    key: str
    value: str

    @property
    def is_valid(self) -> bool:
        """False only for the non-valid syntax sentinel."""
        return self != NON_VALID_PROVIDE


# Placeholder surfaced to the user instead of raising on malformed input
NON_VALID_PROVIDE = ProvideEntry(NON_VALID_PROVIDE_TEXT, "")


class FileEventKind:
    """Kinds of file system notifications understood by the session.

    Design: Using class constants (not Enum) for JSON-compatible strings.
    """

    CREATED = "created"
    CHANGED = "changed"
    DELETED = "deleted"


@dataclass
class AncestorRecord:
    """An ancestor component file containing at least one provide call.

    Produced once per distinct ancestor file, in DFS visitation order.
    """

    name: str  # Display name: file base name including extension
    source: str  # Path of the ancestor file
    provides: List[str] = field(default_factory=list)  # Raw provide(...) call texts

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "name": self.name,
            "source": self.source,
            "provides": list(self.provides),
        }


@dataclass
class IndexStatistics:
    """Counters for the content, provides and importer caches."""

    content_hits: int = 0
    content_misses: int = 0
    provides_hits: int = 0
    provides_misses: int = 0
    importer_hits: int = 0
    importer_misses: int = 0
    file_reads: int = 0  # Physical reads issued to the reader
    failed_reads: int = 0  # Reads that failed and were cached as empty content

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "content_hits": self.content_hits,
            "content_misses": self.content_misses,
            "provides_hits": self.provides_hits,
            "provides_misses": self.provides_misses,
            "importer_hits": self.importer_hits,
            "importer_misses": self.importer_misses,
            "file_reads": self.file_reads,
            "failed_reads": self.failed_reads,
        }

    def merged(self, other: "IndexStatistics") -> "IndexStatistics":
        """Return a new instance with the counters of both summed."""
        return IndexStatistics(
            **{name: value + getattr(other, name) for name, value in self.to_dict().items()}
        )
