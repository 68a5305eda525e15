"""
Error types for mode configuration resolution.

Parse and schema errors are file-scoped and recovered by the loaders.
Duplicate slugs within one source abort the whole resolution.
"""

from typing import List


class ModeConfigError(Exception):
    """Base class for mode configuration errors."""
    pass


class ModeParseError(ModeConfigError):
    """Raised when a configuration file does not contain a usable YAML document."""

    def __init__(self, origin: str, reason: str):
        self.origin = origin
        self.reason = reason
        super().__init__(f"Failed to parse {origin}: {reason}")


class SchemaValidationError(ModeConfigError):
    """Raised when a parsed record does not satisfy the mode schema."""

    def __init__(self, origin: str, errors: List[str]):
        self.origin = origin
        self.errors = errors
        super().__init__(f"Schema validation failed for {origin}: {'; '.join(errors)}")


class DuplicateSlugError(ModeConfigError):
    """Raised when two entries of the same source declare the same slug."""

    def __init__(self, slug: str, first_path: str, second_path: str):
        self.slug = slug
        self.first_path = first_path
        self.second_path = second_path
        super().__init__(
            f'Duplicate mode slug detected: "{slug}". Files: {first_path} and {second_path}'
        )
