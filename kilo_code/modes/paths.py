"""
Filesystem locations of the mode configuration sources.

The host (editor or CLI) supplies the project root and the global storage
root through a PathProvider; ModePaths derives every source location from
them:

- project directory:  <project>/.kilocode/modes/
- project file:       <project>/.kilocodemodes (legacy alias: <project>/.roomodes)
- global directory:   <globalStorage>/.kilocode/modes/
- global file:        <globalStorage>/settings/customModes.yaml
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .config import ModeSource
from .errors import ModeConfigError

KILOCODE_DIR = ".kilocode"
MODES_DIR = "modes"
PROJECT_MODES_FILENAME = ".kilocodemodes"
LEGACY_PROJECT_MODES_FILENAME = ".roomodes"
SETTINGS_DIR = "settings"
GLOBAL_MODES_FILENAME = "customModes.yaml"
MODE_FILE_EXTENSION = ".yaml"


class Representation(str, Enum):
    """How a scope encodes its modes on disk."""

    DIRECTORY = "directory"
    FILE = "file"


@dataclass(frozen=True)
class ConfigSource:
    """One physical configuration source: a (scope, representation) pair and its path."""

    scope: ModeSource
    representation: Representation
    path: Path
    legacy: bool = False

    def describe(self) -> str:
        label = f"{self.scope.value} {self.representation.value}"
        return f"{label} (legacy)" if self.legacy else label


class PathProvider(ABC):
    """Supplies the active project root and the global storage root."""

    @abstractmethod
    def get_project_root(self) -> Optional[Path]:
        """Return the project root, or None when no project is open."""
        pass

    @abstractmethod
    def get_global_storage_root(self) -> Path:
        """Return the user-wide storage root."""
        pass


class StaticPathProvider(PathProvider):
    """PathProvider over fixed paths, used by the CLI and in tests."""

    def __init__(self, global_storage_root: Path, project_root: Optional[Path] = None):
        self.global_storage_root = Path(global_storage_root)
        self.project_root = Path(project_root) if project_root else None

    def get_project_root(self) -> Optional[Path]:
        return self.project_root

    def get_global_storage_root(self) -> Path:
        return self.global_storage_root


class ModePaths:
    """Derives source locations for both scopes from a PathProvider."""

    def __init__(self, provider: PathProvider):
        self.provider = provider

    def scope_root(self, scope: ModeSource) -> Optional[Path]:
        if ModeSource(scope) == ModeSource.PROJECT:
            return self.provider.get_project_root()
        return self.provider.get_global_storage_root()

    def require_scope_root(self, scope: ModeSource) -> Path:
        """Like scope_root, but raises when the scope has no root to write into."""
        root = self.scope_root(scope)
        if root is None:
            raise ModeConfigError("No project folder found for project-specific mode")
        return root

    def modes_dir(self, scope: ModeSource) -> Optional[Path]:
        root = self.scope_root(scope)
        return root / KILOCODE_DIR / MODES_DIR if root else None

    def monolithic_file(self, scope: ModeSource) -> Optional[Path]:
        root = self.scope_root(scope)
        if root is None:
            return None
        if ModeSource(scope) == ModeSource.PROJECT:
            return root / PROJECT_MODES_FILENAME
        return root / SETTINGS_DIR / GLOBAL_MODES_FILENAME

    def legacy_project_file(self) -> Optional[Path]:
        root = self.provider.get_project_root()
        return root / LEGACY_PROJECT_MODES_FILENAME if root else None

    def monolithic_files(self, scope: ModeSource) -> List[Path]:
        """All monolithic files a scope may hold modes in, legacy alias included."""
        files = []
        primary = self.monolithic_file(scope)
        if primary is not None:
            files.append(primary)
        if ModeSource(scope) == ModeSource.PROJECT:
            legacy = self.legacy_project_file()
            if legacy is not None:
                files.append(legacy)
        return files

    def active_monolithic_file(self, scope: ModeSource) -> Optional[Path]:
        """The monolithic file currently read for a scope.

        For the project scope this is the legacy alias when only the alias
        exists, so that writes do not hide the modes it already holds.
        """
        primary = self.monolithic_file(scope)
        if primary is None or ModeSource(scope) == ModeSource.GLOBAL:
            return primary
        legacy = self.legacy_project_file()
        if not primary.exists() and legacy.exists():
            return legacy
        return primary

    def mode_file(self, scope: ModeSource, slug: str, extension: str = MODE_FILE_EXTENSION) -> Path:
        """Path of the per-mode file for ``slug`` in the scope's modes directory."""
        root = self.require_scope_root(scope)
        return root / KILOCODE_DIR / MODES_DIR / f"{slug}{extension}"

    def rules_root(self, scope: ModeSource) -> Path:
        """Base directory that rule files of a scope are written under."""
        return self.require_scope_root(scope) / KILOCODE_DIR

    def read_sources(self) -> List[ConfigSource]:
        """
        Sources to resolve, highest precedence first.

        The legacy project file stands in for ``.kilocodemodes`` only when the
        latter does not exist. A project scope without a project root
        contributes no sources.
        """
        sources: List[ConfigSource] = []

        project_dir = self.modes_dir(ModeSource.PROJECT)
        if project_dir is not None:
            sources.append(ConfigSource(ModeSource.PROJECT, Representation.DIRECTORY, project_dir))

            project_file = self.active_monolithic_file(ModeSource.PROJECT)
            is_legacy = project_file == self.legacy_project_file()
            sources.append(
                ConfigSource(ModeSource.PROJECT, Representation.FILE, project_file, legacy=is_legacy)
            )

        sources.append(
            ConfigSource(ModeSource.GLOBAL, Representation.DIRECTORY, self.modes_dir(ModeSource.GLOBAL))
        )
        sources.append(
            ConfigSource(ModeSource.GLOBAL, Representation.FILE, self.monolithic_file(ModeSource.GLOBAL))
        )
        return sources

    def is_config_path(self, path: Path) -> bool:
        """Check whether a changed path can affect the resolved modes."""
        candidate = Path(path).resolve()
        for scope in (ModeSource.PROJECT, ModeSource.GLOBAL):
            modes_dir = self.modes_dir(scope)
            if modes_dir is not None:
                resolved_dir = modes_dir.resolve()
                if candidate == resolved_dir or resolved_dir in candidate.parents:
                    return True
            for file_path in self.monolithic_files(scope):
                if candidate == file_path.resolve():
                    return True
        return False
