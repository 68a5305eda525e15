"""Loading of single-mode YAML files."""

import logging
from pathlib import Path
from typing import Optional

from .config import ModeConfig, validate_mode_record
from .errors import ModeParseError, SchemaValidationError
from .yaml_io import parse_yaml, read_config_text


def parse_mode_text(text: str, origin: str) -> ModeConfig:
    """
    Parse the text of a per-mode file into a validated ModeConfig.

    Args:
        text: YAML text of the file
        origin: Path or label used in error messages

    Raises:
        ModeParseError: If the text is not a single YAML mapping
        SchemaValidationError: If the mapping fails schema validation
    """
    data = parse_yaml(text, origin)

    # Only a single mode object per file is accepted
    if not isinstance(data, dict):
        kind = "empty document" if data is None else type(data).__name__
        raise ModeParseError(origin, f"mode file must contain a single YAML mapping, got {kind}")

    mode, errors = validate_mode_record(data)
    if mode is None:
        raise SchemaValidationError(origin, errors)
    return mode


class ModeFileLoader:
    """Reads and validates one candidate mode file.

    Content problems (bad YAML, wrong shape, schema errors) are logged and
    reported as ``None`` so that one malformed file never aborts a scan.
    I/O errors other than a missing file propagate.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    async def load(self, path: Path) -> Optional[ModeConfig]:
        """Load the mode defined in ``path``, or None if it is unusable."""
        try:
            text = read_config_text(path)
            if text is None:
                # Removed between the scan and the read
                self.logger.debug(f"Mode file disappeared before reading: {path}")
                return None
            mode = parse_mode_text(text, str(path))
        except SchemaValidationError as e:
            self.logger.warning(f"Skipping invalid mode file {path}: {'; '.join(e.errors)}")
            return None
        except ModeParseError as e:
            self.logger.warning(f"Skipping mode file {path}: {e.reason}")
            return None

        self.logger.debug(f"Loaded mode '{mode.slug}' from {path}")
        return mode
