"""Directory scanning for per-mode YAML files."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class FileEntry:
    """A candidate mode file found by the scanner.

    Attributes:
        full_path: Absolute path to the file
        relative_path: POSIX-style path relative to the scanned root
    """

    full_path: Path
    relative_path: str


class DirectoryScanner:
    """Walks a modes directory and collects candidate YAML files.

    The walk uses an explicit stack bounded by ``max_depth``. Excluded
    directories are never descended into, hidden directories are skipped
    except ``.roo``, and only ``.yaml``/``.yml`` files whose name does
    not start with ``_`` are returned.

    Example:
        >>> scanner = DirectoryScanner()
        >>> entries = await scanner.scan(Path(".kilocode/modes"))
        >>> [e.relative_path for e in entries]
        ['architect.yaml', 'team/reviewer.yml']
    """

    # Directories we never traverse into
    EXCLUDED_DIRS = frozenset({
        ".git",
        ".svn",
        ".hg",
        "node_modules",
        "dist",
        "build",
        ".next",
        ".cache",
        ".idea",
        ".vscode",
        "__pycache__",
    })

    # Files we never consider
    EXCLUDED_FILES = frozenset({".DS_Store", "Thumbs.db"})

    ALLOWED_EXTENSIONS = frozenset({".yaml", ".yml"})

    # Hidden directory that is still walked when nested under a modes root
    TRAVERSABLE_HIDDEN_DIR = ".roo"

    DEFAULT_MAX_DEPTH = 16

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH, logger: Optional[logging.Logger] = None):
        self.max_depth = max_depth
        self.logger = logger or logging.getLogger(__name__)

    async def scan(self, root: Path) -> List[FileEntry]:
        """Scan ``root`` recursively and return candidate mode files.

        A missing or unreadable root yields an empty list.
        """
        root = Path(root)
        results: List[FileEntry] = []

        if not root.is_dir():
            self.logger.debug(f"Modes directory not present: {root}")
            return results

        stack: List[Tuple[Path, int]] = [(root, 0)]
        while stack:
            directory, depth = stack.pop()
            try:
                entries = sorted(directory.iterdir(), key=lambda p: p.name)
            except OSError as e:
                self.logger.debug(f"Cannot read directory {directory}: {e}")
                continue

            subdirs: List[Tuple[Path, int]] = []
            for entry in entries:
                try:
                    is_dir = entry.is_dir()
                except OSError as e:
                    self.logger.debug(f"Cannot stat {entry}: {e}")
                    continue

                if is_dir:
                    if not self.should_descend(entry.name):
                        self.logger.debug(f"Skipping directory: {entry}")
                        continue
                    if depth + 1 > self.max_depth:
                        self.logger.warning(
                            f"Skipping {entry}: deeper than max scan depth {self.max_depth}"
                        )
                        continue
                    subdirs.append((entry, depth + 1))
                    continue

                if self.should_include_file(entry):
                    results.append(FileEntry(entry, entry.relative_to(root).as_posix()))
                else:
                    self.logger.debug(f"Skipping file: {entry}")

            # Reversed so the lexically first subdirectory is walked first
            stack.extend(reversed(subdirs))

        self.logger.debug(f"Scan of {root} found {len(results)} mode files")
        return results

    def should_descend(self, name: str) -> bool:
        """Check whether a directory with this name is walked."""
        if name in self.EXCLUDED_DIRS:
            return False
        if name.startswith(".") and name != self.TRAVERSABLE_HIDDEN_DIR:
            return False
        return True

    def should_include_file(self, path: Path) -> bool:
        """Check whether a file is a candidate mode file."""
        name = path.name
        if name in self.EXCLUDED_FILES:
            return False
        if path.suffix.lower() not in self.ALLOWED_EXTENSIONS:
            return False
        # Underscore-prefixed files are disabled modes or templates
        if name.startswith("_"):
            return False
        return True
