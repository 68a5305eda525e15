"""YAML reading and writing shared by the loaders and writers."""

from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ModeParseError


def read_config_text(path: Path) -> Optional[str]:
    """
    Read a configuration file as UTF-8 text.

    Returns:
        File contents with any BOM stripped, or None if the file does not exist

    Raises:
        ModeParseError: If the bytes are not valid UTF-8
        OSError: For any other I/O failure
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except FileNotFoundError:
        return None
    except UnicodeDecodeError as e:
        raise ModeParseError(str(path), f"not valid UTF-8 ({e.reason})") from e

    # Strip BOM if present
    if content.startswith("\ufeff"):
        content = content[1:]
    return content


def parse_yaml(text: str, origin: str) -> Any:
    """Parse YAML text, raising ModeParseError on syntax errors."""
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ModeParseError(origin, f"invalid YAML: {e}") from e


def dump_yaml(data: Any) -> str:
    return yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)


def write_yaml(path: Path, data: Any) -> None:
    """Write ``data`` as YAML, creating parent directories if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(dump_yaml(data))
