"""Tests for mode bundle import and export."""

from unittest.mock import patch

import pytest
import yaml

from kilo_code.modes.bundles import ImportExportCoordinator
from kilo_code.modes.config import ModeConfig, ModeSource
from kilo_code.modes.persistence import PersistenceCoordinator


@pytest.fixture
def coordinator(paths):
    return ImportExportCoordinator(paths, PersistenceCoordinator(paths))


def bundle(*modes):
    return yaml.safe_dump({"customModes": list(modes)}, sort_keys=False)


class TestImportBundle:
    """Test importing bundles."""

    @pytest.mark.asyncio
    async def test_import_to_directory_with_rules(self, coordinator, layout, workspace, mode_record):
        record = mode_record("imported", "Imported", rules=[{"id": "r1", "description": "test"}])
        record["rulesFiles"] = [{"relativePath": "rules-imported/foo.md", "content": "hello"}]

        result = await coordinator.import_bundle(bundle(record), ModeSource.PROJECT, to_directory=True)

        assert result.success is True
        assert result.imported == ["imported"]
        written = yaml.safe_load((layout["project_dir"] / "imported.yaml").read_text())
        assert written["slug"] == "imported"
        assert written["source"] == "project"
        assert written["rules"] == [{"id": "r1", "description": "test"}]
        assert "rulesFiles" not in written
        rules_file = workspace / ".kilocode" / "rules-imported" / "foo.md"
        assert rules_file.read_text() == "hello"

    @pytest.mark.asyncio
    async def test_import_to_global_monolithic(self, coordinator, layout, storage, mode_record):
        record = mode_record("g", "G", source="project")
        record["rulesFiles"] = [{"relativePath": "rules-g/a.md", "content": "global rule"}]

        result = await coordinator.import_bundle(bundle(record, mode_record("h")), ModeSource.GLOBAL)

        assert result.success is True
        entries = yaml.safe_load(layout["global_file"].read_text())["customModes"]
        assert [(e["slug"], e["source"]) for e in entries] == [("g", "global"), ("h", "global")]
        assert (storage / ".kilocode" / "rules-g" / "a.md").read_text() == "global rule"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["customModes: [oops\n", "customModes: []\n", "- slug: a\n", "other: 1\n"])
    async def test_invalid_bundle_shape(self, coordinator, text):
        result = await coordinator.import_bundle(text)

        assert result.success is False
        assert "Invalid import format" in result.error

    @pytest.mark.asyncio
    async def test_invalid_mode_writes_nothing(self, coordinator, layout, mode_record):
        result = await coordinator.import_bundle(bundle(mode_record("ok"), {"slug": "broken"}))

        assert result.success is False
        assert "Invalid mode 2" in result.error
        assert not layout["project_file"].exists()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("relative_path", ["../escape.md", "/etc/passwd", "rules-x/../../up.md", ""])
    async def test_unsafe_rules_path_writes_nothing(self, coordinator, layout, workspace, mode_record, relative_path):
        record = mode_record("x")
        record["rulesFiles"] = [{"relativePath": relative_path, "content": "nope"}]

        result = await coordinator.import_bundle(bundle(record), to_directory=True)

        assert result.success is False
        assert "Invalid rules file path" in result.error
        assert not layout["project_dir"].exists()
        assert not (workspace.parent / "escape.md").exists()

    @pytest.mark.asyncio
    async def test_malformed_rules_files(self, coordinator, mode_record):
        record = mode_record("x")
        record["rulesFiles"] = [{"content": "missing path"}]

        result = await coordinator.import_bundle(bundle(record))

        assert result.success is False
        assert "relativePath" in result.error

    @pytest.mark.asyncio
    async def test_write_failure_reports_partial_import(self, coordinator, layout, mode_record):
        real_update = PersistenceCoordinator.update
        calls = []

        async def failing_update(self, slug, config, to_directory=False):
            calls.append(slug)
            if slug == "second":
                raise PermissionError("read-only volume")
            return await real_update(self, slug, config, to_directory=to_directory)

        with patch.object(PersistenceCoordinator, "update", failing_update):
            result = await coordinator.import_bundle(
                bundle(mode_record("first"), mode_record("second"), mode_record("third")),
                to_directory=True,
            )

        assert result.success is False
        assert result.error == "read-only volume"
        assert result.imported == ["first"]
        assert calls == ["first", "second"]
        # No rollback of what was already written
        assert (layout["project_dir"] / "first.yaml").exists()

    @pytest.mark.asyncio
    async def test_project_scope_without_project(self, storage, mode_record):
        from kilo_code.modes.paths import ModePaths, StaticPathProvider

        paths = ModePaths(StaticPathProvider(storage))
        coordinator = ImportExportCoordinator(paths, PersistenceCoordinator(paths))

        result = await coordinator.import_bundle(bundle(mode_record("x")), ModeSource.PROJECT)

        assert result.success is False
        assert "No project folder" in result.error


class TestExportBundle:
    """Test exporting bundles."""

    @pytest.mark.asyncio
    async def test_export_with_rules(self, coordinator, workspace):
        rules_dir = workspace / ".kilocode" / "rules-writer"
        (rules_dir / "nested").mkdir(parents=True)
        (rules_dir / "b.md").write_text("second")
        (rules_dir / "a.md").write_text("first")
        (rules_dir / "nested" / "c.md").write_text("third")
        mode = ModeConfig(
            slug="writer",
            name="Writer",
            role_definition="You write",
            groups=["read"],
            source=ModeSource.PROJECT,
        )

        result = await coordinator.export_bundle(mode)

        assert result.success is True
        exported = yaml.safe_load(result.yaml)["customModes"]
        assert len(exported) == 1
        assert "source" not in exported[0]
        assert exported[0]["rulesFiles"] == [
            {"relativePath": "rules-writer/a.md", "content": "first"},
            {"relativePath": "rules-writer/b.md", "content": "second"},
            {"relativePath": "rules-writer/nested/c.md", "content": "third"},
        ]

    @pytest.mark.asyncio
    async def test_export_without_rules(self, coordinator):
        mode = ModeConfig(slug="plain", name="Plain", role_definition="Plain", groups=["read"], source=ModeSource.GLOBAL)

        result = await coordinator.export_bundle(mode)

        assert result.success is True
        assert "rulesFiles" not in yaml.safe_load(result.yaml)["customModes"][0]

    @pytest.mark.asyncio
    async def test_exported_bundle_imports_into_other_scope(self, coordinator, layout, workspace, storage):
        rules_dir = workspace / ".kilocode" / "rules-writer"
        rules_dir.mkdir(parents=True)
        (rules_dir / "style.md").write_text("Be concise")
        mode = ModeConfig(
            slug="writer", name="Writer", role_definition="You write", groups=["read"], source=ModeSource.PROJECT
        )

        exported = await coordinator.export_bundle(mode)
        result = await coordinator.import_bundle(exported.yaml, ModeSource.GLOBAL, to_directory=True)

        assert result.success is True
        assert yaml.safe_load((layout["global_dir"] / "writer.yaml").read_text())["name"] == "Writer"
        assert (storage / ".kilocode" / "rules-writer" / "style.md").read_text() == "Be concise"
