"""
CLI entry point for custom mode management.

This module provides a command-line interface over CustomModesManager so the
mode engine can be used outside the editor. It can be invoked as:
python -m kilo_code
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .modes import CustomModesManager, ModeConfigError, ModeSource
from .modes.yaml_io import dump_yaml
from .settings import ModesSettings, load_settings


def setup_logging(settings: ModesSettings) -> None:
    """Configure logging on stderr; stdout carries command output."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format=settings.log_format,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog="kilo_code",
        description="Resolve, edit, import and export Kilo Code custom modes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List the resolved modes of a project
  python -m kilo_code --project-root /path/to/project list

  # Import a bundle as per-mode files in the global scope
  python -m kilo_code import reviewer.yaml --scope global --to-directory

Environment Variables:
  KILO_PROJECT_ROOT     Project root directory
  KILO_GLOBAL_STORAGE   Global storage directory (default: ~/.kilocode-storage)
  KILO_MAX_SCAN_DEPTH   Maximum modes directory depth
  KILO_LOG_LEVEL        Logging level (DEBUG, INFO, WARNING, ERROR)
        """,
    )

    parser.add_argument("--config", type=Path, help="Path to settings file (JSON)")
    parser.add_argument("--project-root", type=Path, help="Project root directory")
    parser.add_argument("--global-storage", type=Path, help="Global storage directory")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="List resolved custom modes")

    show = commands.add_parser("show", help="Print one resolved mode as YAML")
    show.add_argument("slug")

    export = commands.add_parser("export", help="Export a mode with its rule files")
    export.add_argument("slug")
    export.add_argument("-o", "--output", type=Path, help="Write the bundle to a file instead of stdout")

    import_cmd = commands.add_parser("import", help="Import a mode bundle")
    import_cmd.add_argument("bundle", type=Path)
    import_cmd.add_argument(
        "--scope",
        choices=[s.value for s in ModeSource],
        default=ModeSource.PROJECT.value,
    )
    import_cmd.add_argument(
        "--to-directory",
        action="store_true",
        help="Write per-mode files instead of the monolithic file",
    )

    delete = commands.add_parser("delete", help="Delete a mode from every source")
    delete.add_argument("slug")

    return parser.parse_args(argv)


async def run(args: argparse.Namespace, settings: ModesSettings) -> int:
    """Execute one command and return the exit code."""
    manager = CustomModesManager(settings.path_provider(), max_scan_depth=settings.max_scan_depth)

    if args.command == "list":
        for mode in await manager.get_custom_modes():
            print(f"{mode.slug}\t{mode.name}\t{mode.source.value}")
        return 0

    if args.command == "show":
        mode = await manager.get_mode(args.slug)
        if mode is None:
            print(f"Mode not found: {args.slug}", file=sys.stderr)
            return 1
        print(dump_yaml(mode.to_record()), end="")
        return 0

    if args.command == "export":
        result = await manager.export_mode_with_rules(args.slug)
        if not result.success:
            print(f"Export failed: {result.error}", file=sys.stderr)
            return 1
        if args.output:
            args.output.write_text(result.yaml, encoding="utf-8")
        else:
            print(result.yaml, end="")
        return 0

    if args.command == "import":
        bundle_text = args.bundle.read_text(encoding="utf-8")
        result = await manager.import_mode_with_rules(
            bundle_text, ModeSource(args.scope), to_directory=args.to_directory
        )
        if not result.success:
            print(f"Import failed: {result.error}", file=sys.stderr)
            return 1
        print(f"Imported: {', '.join(result.imported)}")
        return 0

    if args.command == "delete":
        await manager.delete_custom_mode(args.slug)
        return 0

    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_arguments(argv)

    try:
        settings = load_settings(config_file=args.config, use_env=True)
        if args.project_root:
            settings.project_root = args.project_root.resolve()
        if args.global_storage:
            settings.global_storage_dir = args.global_storage.resolve()
        if args.log_level:
            settings.log_level = args.log_level
        settings.validate()
    except (OSError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(settings)

    try:
        return asyncio.run(run(args, settings))
    except ModeConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
