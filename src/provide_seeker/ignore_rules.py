# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Ignore rules shared by file enumeration and the file watcher.

A component file is in the universe exactly when the watcher would report
events for it, so both sides ask the same IgnoreRules instance.

Sources, checked in order:
- ALWAYS_IGNORED directory names (build output, dependencies, VCS)
- .gitignore patterns of the project root
- Configured patterns (exclude_patterns and ignore_patterns)

Matching:
- Built-in and .gitignore patterns are tested against the root-relative
  path, the file name and every relative path component
- Configured patterns are tested against the root-relative POSIX path and the
  file name; a leading "**/" also matches at the project root
"""

import fnmatch
import logging
from pathlib import Path
from typing import Iterable, Optional, Set, Union

logger = logging.getLogger(__name__)


class IgnoreRules:
    """Decides which paths under a project root are never analyzed."""

    ALWAYS_IGNORED = {
        ".git",
        "node_modules",
        ".nuxt",
        ".output",
        ".vite",
        ".cache",
        "coverage",
        ".venv",
        "dist",
        "build",
    }

    def __init__(
        self,
        project_root: Union[str, Path],
        gitignore_path: Optional[Union[str, Path]] = None,
        user_ignore_patterns: Optional[Iterable[str]] = None,
    ):
        """Initialize ignore rules.

        Args:
            project_root: Root the relative paths are computed against
            gitignore_path: Path to .gitignore file (defaults to {project_root}/.gitignore)
            user_ignore_patterns: Configured fnmatch patterns
        """
        self.project_root = Path(project_root).resolve()
        self.gitignore_path = (
            Path(gitignore_path) if gitignore_path else self.project_root / ".gitignore"
        )
        self.user_ignore_patterns: Set[str] = set(user_ignore_patterns or ())
        self._gitignore_patterns: Set[str] = self._load_gitignore()

        logger.debug(
            f"IgnoreRules for {self.project_root}: {len(self._gitignore_patterns)} .gitignore "
            f"pattern(s), {len(self.user_ignore_patterns)} configured pattern(s)"
        )

    def _load_gitignore(self) -> Set[str]:
        """Read .gitignore, skipping blanks, comments and lines over 1000 characters."""
        patterns: Set[str] = set()

        if not self.gitignore_path.exists():
            return patterns

        try:
            with open(self.gitignore_path, encoding="utf-8") as f:
                for line_num, line in enumerate(f, 1):
                    line = line.strip()
                    if not line or line.startswith("#"):
                        continue

                    if len(line) > 1000:
                        logger.warning(
                            f".gitignore line {line_num}: Pattern too long (>1000 chars), skipping"
                        )
                        continue

                    # "dist/" should match the directory as a path component
                    patterns.add(line.rstrip("/") if line != "/" else line)
        except (FileNotFoundError, PermissionError) as e:
            logger.warning(f"Failed to load .gitignore: {e}")
        except UnicodeDecodeError as e:
            logger.error(f"Failed to decode .gitignore (encoding error): {e}")
        except OSError as e:
            logger.error(f"Failed to read .gitignore: {e}")

        return patterns

    @property
    def gitignore_patterns(self) -> Set[str]:
        return set(self._gitignore_patterns)

    @staticmethod
    def _matches_component(path: Path, rel_path_str: str, pattern: str) -> bool:
        if fnmatch.fnmatch(rel_path_str, pattern) or fnmatch.fnmatch(path.name, pattern):
            return True
        return any(fnmatch.fnmatch(part, pattern) for part in Path(rel_path_str).parts)

    @staticmethod
    def _matches_configured(path: Path, rel_path_str: str, pattern: str) -> bool:
        if fnmatch.fnmatch(rel_path_str, pattern) or fnmatch.fnmatch(path.name, pattern):
            return True
        # "**/x/**" should also match "x/..." at the project root
        return pattern.startswith("**/") and fnmatch.fnmatch(rel_path_str, pattern[3:])

    def should_ignore(self, file_path: Union[str, Path]) -> bool:
        """Check if a path is excluded from analysis.

        Args:
            file_path: Absolute or root-relative file path

        Returns:
            True if the path should be ignored
        """
        path = Path(file_path)

        try:
            rel_path_str = path.relative_to(self.project_root).as_posix()
        except ValueError:
            rel_path_str = path.as_posix()

        for pattern in self.ALWAYS_IGNORED | self._gitignore_patterns:
            if self._matches_component(path, rel_path_str, pattern):
                return True

        for pattern in self.user_ignore_patterns:
            if self._matches_configured(path, rel_path_str, pattern):
                return True

        return False
