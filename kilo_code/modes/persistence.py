"""
Writing modes back to their configuration sources.

Updates go either to a per-mode file in the scope's modes directory or to an
entry in the scope's monolithic file. Deletes remove a slug from every
source it appears in. Writes are unconditional (last writer wins) and I/O
errors propagate to the caller.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import ModeConfig, ModeSource
from .errors import ModeParseError
from .loader import ModeFileLoader
from .paths import ModePaths
from .scanner import DirectoryScanner
from .sources import MODES_KEY, read_monolithic_entries
from .yaml_io import write_yaml


def _entry_slug(raw: Any) -> Optional[str]:
    return raw.get("slug") if isinstance(raw, dict) else None


class PersistenceCoordinator:
    """Applies create/update/delete operations to the on-disk sources."""

    def __init__(
        self,
        paths: ModePaths,
        scanner: Optional[DirectoryScanner] = None,
        loader: Optional[ModeFileLoader] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.paths = paths
        self.logger = logger or logging.getLogger(__name__)
        self.scanner = scanner or DirectoryScanner(logger=self.logger)
        self.loader = loader or ModeFileLoader(logger=self.logger)

    async def update(self, slug: str, config: ModeConfig, to_directory: bool = False) -> Path:
        """
        Create or replace a mode in the scope given by ``config.source``.

        Args:
            slug: Slug of the mode being written; must match ``config.slug``
            config: Validated mode configuration
            to_directory: Write ``<slug>.yaml`` in the scope's modes directory
                instead of upserting into the scope's monolithic file. Ignored
                when a file in the modes directory already declares the slug;
                that file is rewritten in place

        Returns:
            Path of the file that was written

        Raises:
            ValueError: If ``slug`` does not match the configuration
            ModeConfigError: If the project scope is requested without a project
            ModeParseError: If the monolithic file exists but cannot be parsed
            OSError: On any write failure
        """
        if config.slug != slug:
            raise ValueError(f"Mode slug mismatch: '{slug}' vs config slug '{config.slug}'")

        scope = ModeSource(config.source)
        record = config.to_record()

        # A slug already defined in the modes directory is rewritten where it lives
        declaring = await self._mode_files_declaring(scope, slug, match_file_name=False)
        if declaring or to_directory:
            target = declaring[0] if declaring else self.paths.mode_file(scope, slug)
            for stale in declaring[1:]:
                stale.unlink(missing_ok=True)
                self.logger.info(f"Removed duplicate definition of mode '{slug}' in {stale}")
            write_yaml(target, record)
            self.logger.info(f"Wrote {scope.value} mode '{slug}' to {target}")
            return target

        self.paths.require_scope_root(scope)
        target = self.paths.active_monolithic_file(scope)

        entries = read_monolithic_entries(target) or []
        updated: List[Any] = []
        replaced = False
        for raw in entries:
            if _entry_slug(raw) == slug:
                if not replaced:
                    updated.append(record)
                    replaced = True
                continue
            # Entries we cannot validate are preserved verbatim
            updated.append(raw)
        if not replaced:
            updated.append(record)

        write_yaml(target, {MODES_KEY: updated})
        self.logger.info(f"{'Updated' if replaced else 'Added'} {scope.value} mode '{slug}' in {target}")
        return target

    async def delete(self, slug: str) -> bool:
        """
        Remove ``slug`` from every source in both scopes.

        Returns:
            True if anything was removed, False if the slug was not found

        Raises:
            OSError: On any delete or write failure
        """
        removed = False

        for scope in (ModeSource.PROJECT, ModeSource.GLOBAL):
            for path in await self._mode_files_declaring(scope, slug):
                path.unlink(missing_ok=True)
                self.logger.info(f"Deleted mode file {path}")
                removed = True

            for file_path in self.paths.monolithic_files(scope):
                if self._remove_from_file(file_path, slug):
                    removed = True

        if not removed:
            self.logger.info(f"Mode '{slug}' not found in any source; nothing to delete")
        return removed

    def _existing_mode_files(self, scope: ModeSource, slug: str) -> List[Path]:
        modes_dir = self.paths.modes_dir(scope)
        if modes_dir is None:
            return []
        candidates = [modes_dir / f"{slug}{ext}" for ext in sorted(DirectoryScanner.ALLOWED_EXTENSIONS)]
        return [path for path in candidates if path.is_file()]

    async def _mode_files_declaring(
        self, scope: ModeSource, slug: str, match_file_name: bool = True
    ) -> List[Path]:
        """Files in the scope's modes directory that define ``slug``.

        Covers any scanned file whose content declares the slug and, with
        ``match_file_name``, ``<slug>.yaml``/``<slug>.yml`` whatever they hold.
        """
        found = self._existing_mode_files(scope, slug) if match_file_name else []
        modes_dir = self.paths.modes_dir(scope)
        if modes_dir is None:
            return found

        for entry in await self.scanner.scan(modes_dir):
            if entry.full_path in found:
                continue
            mode = await self.loader.load(entry.full_path)
            if mode is not None and mode.slug == slug:
                found.append(entry.full_path)
        return found

    def _remove_from_file(self, file_path: Path, slug: str) -> bool:
        try:
            entries = read_monolithic_entries(file_path)
        except ModeParseError as e:
            self.logger.warning(f"Cannot check {file_path} for mode '{slug}': {e.reason}")
            return False
        if entries is None:
            return False

        remaining = [raw for raw in entries if _entry_slug(raw) != slug]
        if len(remaining) == len(entries):
            return False

        data: Dict[str, Any] = {MODES_KEY: remaining}
        write_yaml(file_path, data)
        self.logger.info(f"Removed mode '{slug}' from {file_path}")
        return True
