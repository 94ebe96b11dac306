# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Configuration loading and validation for provide-seeker."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = ".provide_seeker.yml"


class ConfigurationError(Exception):
    """Raised when configuration validation fails critically."""

    pass


class Config:
    """Configuration for the provide-seeker analysis session and server.

    Loads configuration from .provide_seeker.yml with validation and defaults.
    """

    DEFAULTS = {
        "component_glob": "**/*.vue",
        "exclude_patterns": ["**/node_modules/**"],
        "component_extension": ".vue",
        "ignore_patterns": [],
        "max_concurrent_reads": 64,
        # Drop every importer list on create/change instead of only the
        # changed file's own entry
        "strict_importer_invalidation": False,
        "enable_file_watcher": True,
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_path: Path to configuration file. If None, uses default location.
        """
        if config_path is None:
            config_path = Path.cwd() / DEFAULT_CONFIG_FILENAME

        self.config_path = config_path
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load and validate configuration from file."""
        if not self.config_path.exists():
            logger.info(f"Configuration file not found at {self.config_path}, using defaults")
            self._config = self._defaults()
            return

        try:
            with open(self.config_path, encoding="utf-8") as f:
                loaded_config = yaml.safe_load(f)

            if loaded_config is None:
                logger.warning("Configuration file is empty, using defaults")
                self._config = self._defaults()
                return

            if not isinstance(loaded_config, dict):
                logger.warning(
                    f"Configuration file must contain a YAML dictionary, "
                    f"got {type(loaded_config)}, using defaults"
                )
                self._config = self._defaults()
                return

            self._config = self._defaults()
            self._validate_and_merge(loaded_config)

        except yaml.YAMLError as e:
            logger.warning(
                f"Error parsing configuration file {self.config_path}: {e}, using defaults"
            )
            self._config = self._defaults()
        except OSError as e:
            logger.warning(
                f"Error reading configuration file {self.config_path}: {e}, using defaults"
            )
            self._config = self._defaults()

    def _defaults(self) -> Dict[str, Any]:
        # Copy list values so instances never share them
        return {
            key: list(value) if isinstance(value, list) else value
            for key, value in self.DEFAULTS.items()
        }

    def _validate_and_merge(self, loaded_config: Dict[str, Any]) -> None:
        """Validate loaded configuration and merge with defaults.

        Invalid parameters are logged as warnings and defaults are used.
        """
        for key, value in loaded_config.items():
            if key not in self.DEFAULTS:
                logger.warning(f"Unknown configuration parameter '{key}', ignoring")
                continue

            if not self._validate_parameter(key, value):
                logger.warning(
                    f"Invalid value for '{key}': {value}, using default {self.DEFAULTS[key]}"
                )
                continue

            self._config[key] = value

    def _validate_parameter(self, key: str, value: Any) -> bool:
        """Validate a configuration parameter.

        Returns:
            True if valid, False if invalid
        """
        expected_type = type(self.DEFAULTS[key])
        # bool is a subclass of int; reject it for numeric parameters
        if not isinstance(value, expected_type) or (
            expected_type is int and isinstance(value, bool)
        ):
            return False

        if key == "max_concurrent_reads":
            return bool(value > 0)
        elif key == "component_glob":
            return bool(value.strip())
        elif key == "component_extension":
            return bool(value.startswith(".") and len(value) > 1)
        elif key in ("exclude_patterns", "ignore_patterns"):
            return all(isinstance(pattern, str) for pattern in value)

        return True

    @property
    def component_glob(self) -> str:
        """Glob selecting component files, relative to the project root."""
        value = self._config["component_glob"]
        assert isinstance(value, str)
        return value

    @property
    def exclude_patterns(self) -> List[str]:
        """Patterns excluded from the file universe (enumeration and watcher)."""
        value = self._config["exclude_patterns"]
        assert isinstance(value, list)
        return value

    @property
    def component_extension(self) -> str:
        """Extension of component files, including the dot."""
        value = self._config["component_extension"]
        assert isinstance(value, str)
        return value

    @property
    def ignore_patterns(self) -> List[str]:
        """Further patterns excluded from the file universe, beyond .gitignore."""
        value = self._config["ignore_patterns"]
        assert isinstance(value, list)
        return value

    @property
    def max_concurrent_reads(self) -> int:
        """Maximum number of file reads in flight at once."""
        value = self._config["max_concurrent_reads"]
        assert isinstance(value, int)
        return value

    @property
    def strict_importer_invalidation(self) -> bool:
        """Whether create/change events drop every cached importer list."""
        value = self._config["strict_importer_invalidation"]
        assert isinstance(value, bool)
        return value

    @property
    def enable_file_watcher(self) -> bool:
        """Whether the server watches the project for file changes."""
        value = self._config["enable_file_watcher"]
        assert isinstance(value, bool)
        return value
