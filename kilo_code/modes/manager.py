"""
Custom mode management.

CustomModesManager is the entry point used by the rest of the application.
Every read runs a fresh resolution pass over all sources and returns a
snapshot; every mutation writes to disk, re-resolves, and notifies the
optional update callback.
"""

import inspect
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, Union

from .bundles import ExportResult, ImportExportCoordinator, ImportResult
from .config import ModeConfig, ModeSource
from .loader import ModeFileLoader
from .paths import ModePaths, PathProvider
from .persistence import PersistenceCoordinator
from .resolver import PrecedenceResolver
from .scanner import DirectoryScanner
from .sources import SourceAggregator

UpdateCallback = Callable[[List[ModeConfig]], Union[None, Awaitable[None]]]


class CustomModesManager:
    """
    Resolves and mutates custom modes across project and global sources.

    Example:
        >>> provider = StaticPathProvider(Path.home() / ".kilocode-storage", Path.cwd())
        >>> manager = CustomModesManager(provider)
        >>> modes = await manager.get_custom_modes()
        >>> await manager.update_custom_mode("reviewer", reviewer, to_directory=True)
    """

    def __init__(
        self,
        path_provider: PathProvider,
        on_update: Optional[UpdateCallback] = None,
        max_scan_depth: int = DirectoryScanner.DEFAULT_MAX_DEPTH,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the manager.

        Args:
            path_provider: Supplies the project root and global storage root
            on_update: Called with the fresh mode list after every mutation
                or relevant file change; may be sync or async
            max_scan_depth: Maximum directory depth walked under a modes directory
            logger: Logger passed to every component
        """
        self.logger = logger or logging.getLogger(__name__)
        self.paths = ModePaths(path_provider)
        self.on_update = on_update

        scanner = DirectoryScanner(max_depth=max_scan_depth, logger=self.logger)
        loader = ModeFileLoader(logger=self.logger)
        aggregator = SourceAggregator(scanner=scanner, loader=loader, logger=self.logger)

        self.resolver = PrecedenceResolver(self.paths, aggregator=aggregator, logger=self.logger)
        self.persistence = PersistenceCoordinator(
            self.paths, scanner=scanner, loader=loader, logger=self.logger
        )
        self.bundles = ImportExportCoordinator(self.paths, self.persistence, logger=self.logger)

    async def get_custom_modes(self) -> List[ModeConfig]:
        """
        Resolve all custom modes.

        Returns:
            Modes sorted by slug, each stamped with the scope it resolved from

        Raises:
            DuplicateSlugError: If a single source declares a slug twice
        """
        return await self.resolver.resolve()

    async def get_mode(self, slug: str) -> Optional[ModeConfig]:
        """Get a resolved mode by slug."""
        for mode in await self.get_custom_modes():
            if mode.slug == slug:
                return mode
        return None

    async def update_custom_mode(self, slug: str, config: ModeConfig, to_directory: bool = False) -> None:
        """
        Create or replace a mode in the scope named by ``config.source``.

        Args:
            slug: Slug of the mode; must match ``config.slug``
            config: Mode configuration to write
            to_directory: Write a per-mode file instead of a monolithic entry
        """
        await self.persistence.update(slug, config, to_directory=to_directory)
        await self.refresh()

    async def delete_custom_mode(self, slug: str) -> None:
        """Remove a mode from every source that defines it. Missing modes are a no-op."""
        await self.persistence.delete(slug)
        await self.refresh()

    async def import_mode_with_rules(
        self,
        bundle_text: str,
        scope: ModeSource = ModeSource.PROJECT,
        to_directory: bool = False,
    ) -> ImportResult:
        """Import a bundle of modes and rule files into ``scope``."""
        result = await self.bundles.import_bundle(bundle_text, scope, to_directory=to_directory)
        if result.imported:
            await self.refresh()
        return result

    async def export_mode_with_rules(self, slug: str) -> ExportResult:
        """Export the resolved mode ``slug`` together with its rule files."""
        mode = await self.get_mode(slug)
        if mode is None:
            return ExportResult(success=False, error=f"Mode not found: {slug}")
        return await self.bundles.export_bundle(mode)

    async def handle_file_change(self, path: Path) -> bool:
        """
        Entry point for a file watcher.

        Returns:
            True if the path belongs to a mode source and a fresh resolution
            was published, False if the change was ignored
        """
        if not self.paths.is_config_path(Path(path)):
            return False
        self.logger.debug(f"Mode source changed: {path}")
        await self.refresh()
        return True

    async def refresh(self) -> List[ModeConfig]:
        """Re-resolve and notify the update callback."""
        modes = await self.get_custom_modes()
        if self.on_update is not None:
            result: Any = self.on_update(modes)
            if inspect.isawaitable(result):
                await result
        return modes
