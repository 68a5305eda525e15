"""
Mode configuration schema.

This module provides the validated structure of a custom mode, including
ModeConfig, GroupOptions and RulesFile, and the schema-validation entry point
used by the file loaders. Records on disk use camelCase keys (roleDefinition,
whenToUse, fileRegex); attributes use snake_case.
"""

import re
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator

# Tool groups that modes can enable
VALID_TOOL_GROUPS: Set[str] = {"read", "edit", "browser", "command", "mcp", "modes"}

SLUG_PATTERN = re.compile(r"^[a-zA-Z0-9-]+$")


class ModeSource(str, Enum):
    """Scope a mode configuration was loaded from."""

    PROJECT = "project"
    GLOBAL = "global"


class GroupOptions(BaseModel):
    """Options for a tool group, including file restrictions."""

    file_regex: Optional[str] = Field(default=None, alias="fileRegex")
    description: Optional[str] = None

    class Config:
        populate_by_name = True

    @field_validator("file_regex")
    @classmethod
    def _check_regex(cls, value: Optional[str]) -> Optional[str]:
        if value:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"Invalid regex pattern: {value}") from e
        return value

    def matches_file(self, file_path: str) -> bool:
        """Check if a file path matches this group's restrictions."""
        if not self.file_regex:
            return True
        return bool(re.search(self.file_regex, file_path))

    def to_record(self) -> Dict[str, str]:
        record = {}
        if self.file_regex:
            record["fileRegex"] = self.file_regex
        if self.description:
            record["description"] = self.description
        return record


# GroupEntry can be either just a group name or a (group name, options) pair
GroupEntry = Union[str, Tuple[str, GroupOptions]]


class ModeConfig(BaseModel):
    """
    Configuration for a custom mode.

    Attributes:
        slug: Unique identifier (letters, numbers and dashes)
        name: Display name (can include emoji)
        role_definition: The system prompt defining the mode's role
        groups: Enabled tool groups, optionally with file restrictions
        source: Scope the mode was resolved from; recomputed on every load
        when_to_use: Description of when this mode should be used
        description: Short description of the mode
        custom_instructions: Additional mode-specific instructions
        rules: Inline rule snippets carried with the mode
    """

    slug: str
    name: str
    role_definition: str = Field(alias="roleDefinition")
    groups: List[GroupEntry]
    source: ModeSource = ModeSource.GLOBAL
    when_to_use: Optional[str] = Field(default=None, alias="whenToUse")
    description: Optional[str] = None
    custom_instructions: Optional[str] = Field(default=None, alias="customInstructions")
    rules: Optional[List[Any]] = None

    class Config:
        populate_by_name = True

    @field_validator("slug")
    @classmethod
    def _check_slug(cls, value: str) -> str:
        if not SLUG_PATTERN.match(value):
            raise ValueError(
                f"Invalid slug '{value}': must contain only letters, numbers, and dashes"
            )
        return value

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not value:
            raise ValueError("Mode name is required")
        return value

    @field_validator("role_definition")
    @classmethod
    def _check_role_definition(cls, value: str) -> str:
        if not value:
            raise ValueError("Mode role_definition is required")
        return value

    @field_validator("groups")
    @classmethod
    def _check_groups(cls, groups: List[GroupEntry], info: ValidationInfo) -> List[GroupEntry]:
        """Validate that groups don't have duplicates and use valid tool groups."""
        slug = info.data.get("slug", "?")
        seen_groups: Set[str] = set()

        for entry in groups:
            group_name = entry[0] if isinstance(entry, tuple) else entry

            if group_name in seen_groups:
                raise ValueError(f"Duplicate group '{group_name}' in mode '{slug}'")
            seen_groups.add(group_name)

            if group_name not in VALID_TOOL_GROUPS:
                raise ValueError(
                    f"Invalid tool group '{group_name}' in mode '{slug}'. "
                    f"Valid groups: {', '.join(sorted(VALID_TOOL_GROUPS))}"
                )
        return groups

    def is_tool_group_enabled(self, group: str) -> bool:
        """Check if a tool group is enabled in this mode."""
        for entry in self.groups:
            entry_group = entry[0] if isinstance(entry, tuple) else entry
            if entry_group == group:
                return True
        return False

    def get_group_options(self, group: str) -> Optional[GroupOptions]:
        """Get options for a specific tool group, if any."""
        for entry in self.groups:
            if isinstance(entry, tuple):
                entry_group, options = entry
                if entry_group == group:
                    return options
            elif entry == group:
                return None
        return None

    def can_edit_file(self, file_path: str) -> bool:
        """
        Check if this mode can edit a specific file based on fileRegex restrictions.

        Args:
            file_path: Path to the file to check

        Returns:
            True if the mode can edit the file, False otherwise
        """
        if not self.is_tool_group_enabled("edit"):
            return False

        edit_options = self.get_group_options("edit")
        if edit_options is None:
            return True

        return edit_options.matches_file(file_path)

    def with_source(self, source: ModeSource) -> "ModeConfig":
        """Return a copy of this mode stamped with the given scope."""
        return self.model_copy(update={"source": ModeSource(source)})

    def to_record(self, include_source: bool = True) -> Dict[str, Any]:
        """
        Convert the mode to a YAML-safe dict using the on-disk key names.

        Optional fields are omitted when empty.
        """
        record: Dict[str, Any] = {
            "slug": self.slug,
            "name": self.name,
            "roleDefinition": self.role_definition,
            "groups": self._serialize_groups(),
        }
        if include_source:
            record["source"] = self.source.value
        if self.when_to_use:
            record["whenToUse"] = self.when_to_use
        if self.description:
            record["description"] = self.description
        if self.custom_instructions:
            record["customInstructions"] = self.custom_instructions
        if self.rules:
            record["rules"] = list(self.rules)
        return record

    def _serialize_groups(self) -> List[Any]:
        """Convert groups to serializable format."""
        result: List[Any] = []
        for entry in self.groups:
            if isinstance(entry, tuple):
                group_name, options = entry
                result.append([group_name, options.to_record()])
            else:
                result.append(entry)
        return result


class RulesFile(BaseModel):
    """A rule text file carried inside an import/export bundle."""

    relative_path: str = Field(alias="relativePath")
    content: str = ""

    class Config:
        populate_by_name = True


def format_validation_errors(exc: ValidationError) -> List[str]:
    """Flatten a pydantic ValidationError into "field.path: message" strings."""
    errors = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ())) or "(root)"
        errors.append(f"{location}: {err.get('msg', 'invalid value')}")
    return errors


def validate_mode_record(raw: Any) -> Tuple[Optional[ModeConfig], List[str]]:
    """
    Validate a raw record against the mode schema.

    Args:
        raw: Parsed YAML value, expected to be a mapping

    Returns:
        (mode, []) on success, (None, errors) otherwise. Never raises for
        content problems.

    A stored ``source`` key is ignored; provenance is stamped by the caller.
    """
    if not isinstance(raw, dict):
        return None, [f"(root): expected a mapping, got {type(raw).__name__}"]
    record = {key: value for key, value in raw.items() if key != "source"}
    try:
        return ModeConfig.model_validate(record), []
    except ValidationError as e:
        return None, format_validation_errors(e)
