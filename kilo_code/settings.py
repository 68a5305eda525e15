"""
Settings management.

This module provides settings loading for the custom mode engine: where the
project and global storage roots are, how deep modes directories are
scanned, and how logging is configured.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .modes.paths import StaticPathProvider
from .modes.scanner import DirectoryScanner

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class ModesSettings:
    """Settings for the custom mode engine."""

    # Paths
    project_root: Optional[Path] = None
    global_storage_dir: Path = field(default_factory=lambda: Path.home() / ".kilocode-storage")

    # Scanning
    max_scan_depth: int = DirectoryScanner.DEFAULT_MAX_DEPTH

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def from_file(cls, path: Path) -> "ModesSettings":
        """
        Load settings from a JSON file.

        Args:
            path: Path to settings file

        Returns:
            Loaded ModesSettings instance

        Raises:
            FileNotFoundError: If settings file doesn't exist
            json.JSONDecodeError: If settings file is invalid JSON
        """
        with open(path) as f:
            data = json.load(f)

        settings = cls()

        if "paths" in data:
            paths = data["paths"]
            if paths.get("project_root"):
                settings.project_root = Path(paths["project_root"]).expanduser()
            if paths.get("global_storage_dir"):
                settings.global_storage_dir = Path(paths["global_storage_dir"]).expanduser()

        if "scan" in data:
            settings.max_scan_depth = data["scan"].get("max_depth", settings.max_scan_depth)

        if "logging" in data:
            log_config = data["logging"]
            settings.log_level = log_config.get("level", settings.log_level)
            settings.log_format = log_config.get("format", settings.log_format)

        logger.info(f"Loaded settings from {path}")
        return settings

    @classmethod
    def from_env(cls) -> "ModesSettings":
        """
        Load settings from environment variables.

        Environment variables:
        - KILO_PROJECT_ROOT: Project root directory
        - KILO_GLOBAL_STORAGE: Global storage directory (default: ~/.kilocode-storage)
        - KILO_MAX_SCAN_DEPTH: Maximum modes directory depth
        - KILO_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

        Returns:
            ModesSettings loaded from environment
        """
        settings = cls()

        if os.getenv("KILO_PROJECT_ROOT"):
            settings.project_root = Path(os.getenv("KILO_PROJECT_ROOT")).expanduser()

        if os.getenv("KILO_GLOBAL_STORAGE"):
            settings.global_storage_dir = Path(os.getenv("KILO_GLOBAL_STORAGE")).expanduser()

        if os.getenv("KILO_MAX_SCAN_DEPTH"):
            try:
                settings.max_scan_depth = int(os.getenv("KILO_MAX_SCAN_DEPTH"))
            except ValueError:
                logger.warning("Invalid KILO_MAX_SCAN_DEPTH value, using default")

        if os.getenv("KILO_LOG_LEVEL"):
            settings.log_level = os.getenv("KILO_LOG_LEVEL")

        logger.debug("Loaded settings from environment variables")
        return settings

    def to_dict(self) -> dict:
        return {
            "paths": {
                "project_root": str(self.project_root) if self.project_root else None,
                "global_storage_dir": str(self.global_storage_dir),
            },
            "scan": {
                "max_depth": self.max_scan_depth,
            },
            "logging": {
                "level": self.log_level,
                "format": self.log_format,
            },
        }

    def save_to_file(self, path: Path) -> None:
        """Save settings to a JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved settings to {path}")

    def validate(self) -> None:
        """
        Validate settings values.

        Raises:
            ValueError: If settings are invalid
        """
        if self.max_scan_depth <= 0:
            raise ValueError("max_scan_depth must be positive")

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}")

    def path_provider(self) -> StaticPathProvider:
        """Path provider over the configured roots."""
        return StaticPathProvider(self.global_storage_dir, self.project_root)


def load_settings(config_file: Optional[Path] = None, use_env: bool = True) -> ModesSettings:
    """
    Load settings from file and/or environment.

    Priority order:
    1. Settings file (if provided and present)
    2. Environment variables (if use_env=True)
    3. Defaults

    Returns:
        Loaded and validated ModesSettings
    """
    if config_file and config_file.exists():
        settings = ModesSettings.from_file(config_file)
    elif use_env:
        settings = ModesSettings.from_env()
    else:
        settings = ModesSettings()

    settings.validate()
    return settings
