"""
Import and export of portable mode bundles.

A bundle is YAML of the form::

    customModes:
      - slug: reviewer
        name: Reviewer
        roleDefinition: You review code
        groups: [read]
        rulesFiles:
          - relativePath: rules-reviewer/style.md
            content: Prefer small functions.

Rule files are written relative to the scope's ``.kilocode`` directory.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError

from .config import ModeConfig, ModeSource, RulesFile, format_validation_errors, validate_mode_record
from .errors import ModeConfigError, ModeParseError
from .paths import ModePaths
from .persistence import PersistenceCoordinator
from .sources import MODES_KEY
from .yaml_io import dump_yaml, parse_yaml

RULES_DIR_PREFIX = "rules-"


@dataclass
class ImportResult:
    """Outcome of an import.

    Attributes:
        success: True only if every mode and rule file was written
        error: Message of the error that stopped the import
        imported: Slugs fully written before success or failure
    """

    success: bool
    error: Optional[str] = None
    imported: List[str] = field(default_factory=list)


@dataclass
class ExportResult:
    """Outcome of an export, carrying the bundle YAML on success."""

    success: bool
    yaml: Optional[str] = None
    error: Optional[str] = None


def _safe_relative_path(relative_path: str) -> PurePosixPath:
    """Normalize a bundle path, rejecting absolute paths and parent traversal."""
    normalized = PurePosixPath(relative_path.replace("\\", "/"))
    if normalized.is_absolute() or ".." in normalized.parts or not normalized.parts:
        raise ValueError(f"Invalid rules file path: {relative_path}")
    return normalized


class ImportExportCoordinator:
    """Serializes modes with their rule files and materializes imported bundles."""

    def __init__(
        self,
        paths: ModePaths,
        persistence: PersistenceCoordinator,
        logger: Optional[logging.Logger] = None,
    ):
        self.paths = paths
        self.persistence = persistence
        self.logger = logger or logging.getLogger(__name__)

    async def import_bundle(
        self,
        bundle_text: str,
        scope: ModeSource = ModeSource.PROJECT,
        to_directory: bool = False,
    ) -> ImportResult:
        """
        Import every mode of a bundle into ``scope``.

        The whole bundle is validated before anything is written. Write
        failures stop the import and are reported in the result; files
        already written are left in place.
        """
        scope = ModeSource(scope)
        try:
            prepared = self._prepare(bundle_text, scope)
            if scope == ModeSource.PROJECT:
                self.paths.require_scope_root(scope)
        except (ModeConfigError, ValueError) as e:
            self.logger.warning(f"Rejected mode import: {e}")
            return ImportResult(success=False, error=str(e))

        imported: List[str] = []
        try:
            for mode, rules_files in prepared:
                await self.persistence.update(mode.slug, mode, to_directory=to_directory)
                for relative_path, content in rules_files:
                    self._write_rules_file(scope, relative_path, content)
                imported.append(mode.slug)
        except (OSError, ModeConfigError) as e:
            self.logger.error(f"Mode import failed after {len(imported)} modes: {e}")
            return ImportResult(success=False, error=str(e), imported=imported)

        self.logger.info(f"Imported {len(imported)} modes into {scope.value} scope")
        return ImportResult(success=True, imported=imported)

    def _prepare(self, bundle_text: str, scope: ModeSource) -> List[Tuple[ModeConfig, List[Tuple[PurePosixPath, str]]]]:
        try:
            data = parse_yaml(bundle_text, "import bundle")
        except ModeParseError as e:
            raise ModeConfigError(f"Invalid import format: {e.reason}") from e

        entries = data.get(MODES_KEY) if isinstance(data, dict) else None
        if not isinstance(entries, list) or not entries:
            raise ModeConfigError(f"Invalid import format: expected a non-empty '{MODES_KEY}' list")

        prepared = []
        for index, raw in enumerate(entries, start=1):
            mode, errors = validate_mode_record(raw)
            if mode is None:
                raise ModeConfigError(f"Invalid mode {index} in import: {'; '.join(errors)}")
            rules_files = self._parse_rules_files(raw.get("rulesFiles"), mode.slug)
            prepared.append((mode.with_source(scope), rules_files))
        return prepared

    def _parse_rules_files(self, raw: Any, slug: str) -> List[Tuple[PurePosixPath, str]]:
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise ModeConfigError(f"Invalid rulesFiles for mode '{slug}': expected a list")

        parsed = []
        for item in raw:
            try:
                rules_file = RulesFile.model_validate(item)
            except ValidationError as e:
                raise ModeConfigError(
                    f"Invalid rulesFiles entry for mode '{slug}': {'; '.join(format_validation_errors(e))}"
                ) from e
            parsed.append((_safe_relative_path(rules_file.relative_path), rules_file.content))
        return parsed

    def _write_rules_file(self, scope: ModeSource, relative_path: PurePosixPath, content: str) -> None:
        target = self.paths.rules_root(scope).joinpath(*relative_path.parts)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            f.write(content)
        self.logger.debug(f"Wrote rules file {target}")

    async def export_bundle(self, mode: ModeConfig) -> ExportResult:
        """
        Export a mode and its rule files as a bundle.

        Rule files are collected from ``.kilocode/rules-<slug>/`` in the
        mode's scope. The ``source`` key is omitted; it is recomputed on import.
        """
        record = mode.to_record(include_source=False)
        try:
            rules_files = self._collect_rules_files(mode)
        except (OSError, UnicodeDecodeError, ModeConfigError) as e:
            self.logger.error(f"Failed to export mode '{mode.slug}': {e}")
            return ExportResult(success=False, error=str(e))

        if rules_files:
            record["rulesFiles"] = rules_files
        return ExportResult(success=True, yaml=dump_yaml({MODES_KEY: [record]}))

    def _collect_rules_files(self, mode: ModeConfig) -> List[dict]:
        rules_root = self.paths.rules_root(mode.source)
        rules_dir: Path = rules_root / f"{RULES_DIR_PREFIX}{mode.slug}"
        if not rules_dir.is_dir():
            return []

        collected = []
        for path in sorted(p for p in rules_dir.rglob("*") if p.is_file()):
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()
            collected.append({
                "relativePath": path.relative_to(rules_root).as_posix(),
                "content": content,
            })
        return collected
