"""
Kilo Code Custom Mode Configuration

This module resolves custom modes from project and global sources, each of
which may be a directory of per-mode YAML files or a single monolithic file,
and writes changes back to the representation the caller chooses.
"""

from .bundles import ExportResult, ImportExportCoordinator, ImportResult
from .config import (
    GroupEntry,
    GroupOptions,
    ModeConfig,
    ModeSource,
    RulesFile,
    validate_mode_record,
)
from .errors import (
    DuplicateSlugError,
    ModeConfigError,
    ModeParseError,
    SchemaValidationError,
)
from .loader import ModeFileLoader
from .manager import CustomModesManager
from .paths import ConfigSource, ModePaths, PathProvider, Representation, StaticPathProvider
from .persistence import PersistenceCoordinator
from .resolver import PrecedenceResolver, merge_by_precedence
from .scanner import DirectoryScanner, FileEntry
from .sources import SourceAggregator

__all__ = [
    "ModeConfig",
    "GroupOptions",
    "GroupEntry",
    "ModeSource",
    "RulesFile",
    "validate_mode_record",
    "ModeConfigError",
    "ModeParseError",
    "SchemaValidationError",
    "DuplicateSlugError",
    "DirectoryScanner",
    "FileEntry",
    "ModeFileLoader",
    "SourceAggregator",
    "PrecedenceResolver",
    "merge_by_precedence",
    "PersistenceCoordinator",
    "ImportExportCoordinator",
    "ImportResult",
    "ExportResult",
    "ConfigSource",
    "Representation",
    "ModePaths",
    "PathProvider",
    "StaticPathProvider",
    "CustomModesManager",
]
