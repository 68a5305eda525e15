"""
Precedence resolution across configuration sources.

Precedence, highest first: project directory, project file (or its legacy
alias), global directory, global settings file.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional

from .config import ModeConfig
from .paths import ModePaths
from .sources import SourceAggregator


def merge_by_precedence(sources: Iterable[Mapping[str, ModeConfig]]) -> List[ModeConfig]:
    """
    Merge slug-keyed source maps, highest precedence first.

    The first source containing a slug wins; later sources only fill in
    slugs not yet seen. Within-source duplicates never reach this point
    because the aggregator rejects them, so the across-source case is the
    only one resolved here.

    Returns:
        Modes sorted by slug in plain code-point order
    """
    modes_by_slug: Dict[str, ModeConfig] = {}

    for source in sources:
        for slug, mode in source.items():
            if slug not in modes_by_slug:
                modes_by_slug[slug] = mode

    return sorted(modes_by_slug.values(), key=lambda m: m.slug)


class PrecedenceResolver:
    """Aggregates every source in precedence order and merges the results."""

    def __init__(
        self,
        paths: ModePaths,
        aggregator: Optional[SourceAggregator] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.paths = paths
        self.logger = logger or logging.getLogger(__name__)
        self.aggregator = aggregator or SourceAggregator(logger=self.logger)

    async def resolve(self) -> List[ModeConfig]:
        """
        Run a full resolution pass.

        Raises:
            DuplicateSlugError: If any single source contains a slug twice;
                no partial result is returned
        """
        loaded = []
        for source in self.paths.read_sources():
            modes = await self.aggregator.load_source(source)
            if modes:
                self.logger.debug(f"{source.describe()} source {source.path}: {sorted(modes)}")
            loaded.append(modes)

        merged = merge_by_precedence(loaded)
        self.logger.info(f"Resolved {len(merged)} custom modes")
        return merged
