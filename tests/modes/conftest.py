"""Shared fixtures for the mode configuration tests."""

from pathlib import Path

import pytest
import yaml

from kilo_code.modes import CustomModesManager, ModePaths, StaticPathProvider


def _mode_record(slug, name=None, **extras):
    """Build a minimal valid raw mode record."""
    record = {
        "slug": slug,
        "name": name or slug,
        "roleDefinition": f"Role for {slug}",
        "groups": ["read"],
    }
    record.update(extras)
    return record


def _write_yaml(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture
def mode_record():
    return _mode_record


@pytest.fixture
def write_yaml():
    return _write_yaml


@pytest.fixture
def workspace(tmp_path):
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def storage(tmp_path):
    path = tmp_path / "storage"
    path.mkdir()
    return path


@pytest.fixture
def layout(workspace, storage):
    """The five source locations for the workspace/storage pair."""
    return {
        "project_dir": workspace / ".kilocode" / "modes",
        "project_file": workspace / ".kilocodemodes",
        "legacy_file": workspace / ".roomodes",
        "global_dir": storage / ".kilocode" / "modes",
        "global_file": storage / "settings" / "customModes.yaml",
    }


@pytest.fixture
def paths(workspace, storage):
    return ModePaths(StaticPathProvider(storage, workspace))


@pytest.fixture
def manager(workspace, storage):
    return CustomModesManager(StaticPathProvider(storage, workspace))
