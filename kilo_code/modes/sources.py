"""
Aggregation of one configuration source into a slug-keyed map.

A source is a (scope, representation) pair: either a directory of per-mode
files or a monolithic file holding a ``customModes`` list. Within a single
source every slug must be unique; a repeat raises DuplicateSlugError and
aborts the whole resolution. Repeats across different sources are expected
and are settled later by precedence.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import ModeConfig, ModeSource, validate_mode_record
from .errors import DuplicateSlugError, ModeParseError
from .loader import ModeFileLoader
from .paths import ConfigSource, Representation
from .scanner import DirectoryScanner
from .yaml_io import parse_yaml, read_config_text

MODES_KEY = "customModes"


def read_monolithic_entries(path: Path) -> Optional[List[Any]]:
    """
    Read the raw ``customModes`` list of a monolithic file.

    Returns:
        The raw entries, or None if the file does not exist. An empty file
        or a mapping without the key yields an empty list.

    Raises:
        ModeParseError: If the file is not YAML or has the wrong shape
    """
    text = read_config_text(path)
    if text is None:
        return None

    data = parse_yaml(text, str(path))
    if data is None:
        return []
    if not isinstance(data, dict):
        raise ModeParseError(str(path), f"expected a mapping with '{MODES_KEY}', got {type(data).__name__}")

    entries = data.get(MODES_KEY)
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise ModeParseError(str(path), f"'{MODES_KEY}' must be a list, got {type(entries).__name__}")
    return entries


class SourceAggregator:
    """Loads every mode of one source and stamps it with the source's scope."""

    def __init__(
        self,
        scanner: Optional[DirectoryScanner] = None,
        loader: Optional[ModeFileLoader] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.scanner = scanner or DirectoryScanner(logger=self.logger)
        self.loader = loader or ModeFileLoader(logger=self.logger)

    async def load_source(self, source: ConfigSource) -> Dict[str, ModeConfig]:
        if source.representation == Representation.DIRECTORY:
            return await self.load_directory(source.path, source.scope)
        return await self.load_file(source.path, source.scope)

    async def load_directory(self, root: Path, scope: ModeSource) -> Dict[str, ModeConfig]:
        """
        Load all per-mode files under ``root``.

        Raises:
            DuplicateSlugError: If two files declare the same slug
        """
        scope = ModeSource(scope)
        modes: Dict[str, ModeConfig] = {}
        slug_to_file: Dict[str, str] = {}

        for entry in await self.scanner.scan(root):
            mode = await self.loader.load(entry.full_path)
            if mode is None:
                continue

            origin = str(entry.full_path)
            if mode.slug in slug_to_file:
                raise DuplicateSlugError(mode.slug, slug_to_file[mode.slug], origin)

            slug_to_file[mode.slug] = origin
            modes[mode.slug] = mode.with_source(scope)

        self.logger.debug(f"Loaded {len(modes)} {scope.value} modes from directory {root}")
        return modes

    async def load_file(self, path: Path, scope: ModeSource) -> Dict[str, ModeConfig]:
        """
        Load all modes listed in a monolithic file.

        A missing file contributes nothing. A file that cannot be parsed is
        logged and contributes nothing; invalid entries are skipped one by one.

        Raises:
            DuplicateSlugError: If two entries declare the same slug
        """
        scope = ModeSource(scope)
        try:
            entries = read_monolithic_entries(path)
        except ModeParseError as e:
            self.logger.warning(f"Ignoring modes file {path}: {e.reason}")
            return {}
        if entries is None:
            return {}

        modes: Dict[str, ModeConfig] = {}
        slug_to_entry: Dict[str, str] = {}

        for index, raw in enumerate(entries, start=1):
            origin = f"{path} (entry {index})"
            mode, errors = validate_mode_record(raw)
            if mode is None:
                self.logger.warning(f"Skipping invalid mode {origin}: {'; '.join(errors)}")
                continue

            if mode.slug in slug_to_entry:
                raise DuplicateSlugError(mode.slug, slug_to_entry[mode.slug], origin)

            slug_to_entry[mode.slug] = origin
            modes[mode.slug] = mode.with_source(scope)

        self.logger.debug(f"Loaded {len(modes)} {scope.value} modes from file {path}")
        return modes
