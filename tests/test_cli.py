"""Tests for the command-line interface."""

import pytest
import yaml

from kilo_code.__main__ import main, parse_arguments


@pytest.fixture
def roots(tmp_path):
    project = tmp_path / "project"
    storage = tmp_path / "storage"
    project.mkdir()
    storage.mkdir()
    return project, storage


@pytest.fixture
def run_cli(roots):
    project, storage = roots

    def _run(*argv):
        args = ["--project-root", str(project), "--global-storage", str(storage), *argv]
        return main(args)

    return _run


def write_mode(path, slug, name):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump({"slug": slug, "name": name, "roleDefinition": "R", "groups": ["read"]}))


class TestParseArguments:
    """Test argument parsing."""

    def test_import_defaults(self):
        args = parse_arguments(["import", "bundle.yaml"])

        assert args.command == "import"
        assert args.scope == "project"
        assert args.to_directory is False

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_arguments([])


class TestCommands:
    """Test commands end to end."""

    def test_list(self, run_cli, roots, capsys):
        project, storage = roots
        write_mode(project / ".kilocode" / "modes" / "b.yaml", "b", "Bee")
        write_mode(storage / ".kilocode" / "modes" / "a.yaml", "a", "Ay")

        assert run_cli("list") == 0

        assert capsys.readouterr().out.splitlines() == ["a\tAy\tglobal", "b\tBee\tproject"]

    def test_show_missing(self, run_cli, capsys):
        assert run_cli("show", "nope") == 1
        assert "Mode not found" in capsys.readouterr().err

    def test_import_export_delete(self, run_cli, roots, tmp_path, capsys):
        project, _ = roots
        bundle_path = tmp_path / "bundle.yaml"
        bundle_path.write_text(yaml.safe_dump({"customModes": [
            {"slug": "cli", "name": "CLI", "roleDefinition": "R", "groups": ["read"],
             "rulesFiles": [{"relativePath": "rules-cli/a.md", "content": "rule"}]},
        ]}))

        assert run_cli("import", str(bundle_path), "--to-directory") == 0
        assert (project / ".kilocode" / "modes" / "cli.yaml").exists()

        output = tmp_path / "out.yaml"
        assert run_cli("export", "cli", "-o", str(output)) == 0
        exported = yaml.safe_load(output.read_text())["customModes"][0]
        assert exported["rulesFiles"] == [{"relativePath": "rules-cli/a.md", "content": "rule"}]

        assert run_cli("delete", "cli") == 0
        capsys.readouterr()
        assert run_cli("list") == 0
        assert capsys.readouterr().out == ""

    def test_duplicate_slug_exit_code(self, run_cli, roots, capsys):
        project, _ = roots
        write_mode(project / ".kilocode" / "modes" / "a.yaml", "dup", "A")
        write_mode(project / ".kilocode" / "modes" / "b.yaml", "dup", "B")

        assert run_cli("list") == 1
        assert "Duplicate mode slug detected" in capsys.readouterr().err
