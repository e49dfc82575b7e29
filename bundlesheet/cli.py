#!/usr/bin/env python3
"""
bundlesheet - Resource bundle <-> spreadsheet converter

Moves the translations of Java style .properties resource bundles into a
single spreadsheet for translators and back into the bundle files.

Commands:
    export-xls - Export .properties files into one XLSX/CSV file
    import-xls - Import an XLSX/CSV file into .properties files
    formats    - List supported tabular formats

Example Workflow:
    1. bundlesheet export-xls --root src/main/resources --xls-file i18n.xlsx
       → Returns: number of bundles, keys and languages exported

    2. [Translators edit i18n.xlsx, one row per key, one column per language]

    3. bundlesheet import-xls --root src/main/resources --xls-file i18n.xlsx
       → Returns: list of written .properties files
"""

import argparse
import json
import logging
import sys

from .config import Settings, resolve_settings
from .exporter import export_xls
from .format_handlers import MissingKeyAction, TabularRegistry
from .importer import import_xls
from .resource_bundles import find_property_files

logger = logging.getLogger(__name__)


def _settings(args) -> Settings:
    return resolve_settings(
        {
            "root": args.root,
            "includes": args.include,
            "excludes": args.exclude,
            "encoding": args.encoding,
            "xls_file": args.xls_file,
            "missing_key_action": getattr(args, "missing_key_action", None),
            "verbose": args.verbose,
        },
        config_path=args.config,
    )


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def cmd_export(settings: Settings) -> dict:
    """Export resource bundle files to the tabular file."""
    files = find_property_files(settings.root, settings.includes, settings.excludes)
    logger.info("Exporting the following files: %s", [str(f) for f in files])

    result = export_xls(settings.root, files, settings.encoding, settings.xls_file)

    return {
        "status": "ok",
        **result,
        "summary": f"Exported {result['keys']} keys of {result['bundles']} bundles "
                   f"in {len(result['languages'])} languages to {result['target']}.",
    }


def cmd_import(settings: Settings) -> dict:
    """Import the tabular file into resource bundle files."""
    result = import_xls(
        settings.root,
        settings.xls_file,
        settings.encoding,
        MissingKeyAction.from_string(settings.missing_key_action),
    )

    return {
        "status": "ok",
        **result,
        "summary": f"Imported {result['keys']} keys from {result['source']} into "
                   f"{len(result['written'])} files.",
    }


def cmd_formats(args) -> dict:
    """List supported tabular formats."""
    formats = TabularRegistry.list_formats()
    return {
        "status": "ok",
        "formats": formats,
        "summary": f"{len(formats)} formats supported: {', '.join(f['name'] for f in formats)}",
    }


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--root", "-r", help="Root directory of the .properties files (default: .)")
    parser.add_argument("--include", "-i", action="append",
                        help="Glob pattern of files to include, relative to root (repeatable, default: **/*.properties)")
    parser.add_argument("--exclude", "-e", action="append",
                        help="Glob pattern of files to exclude, relative to root (repeatable)")
    parser.add_argument("--encoding", "-c", help="Encoding of the .properties files (default: utf-8)")
    parser.add_argument("--xls-file", "-x", help="XLSX or CSV file (default: i18n.xlsx)")
    parser.add_argument("--config", help="YAML config file (default: bundlesheet.yaml if present)")
    parser.add_argument("--verbose", "-v", action="store_true", default=None, help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bundlesheet",
        description="bundlesheet - Resource bundle <-> spreadsheet converter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Sheet Layout:
  Bundle        | Key      | <default> | de     | en_US
  i18n/messages | greeting | Hi        | Hallo  | Hello

  <default> is the file without locale suffix (messages.properties),
  every other column a locale suffix (messages_de.properties).

Examples:
  # Export all bundles below src/main/resources
  bundlesheet export-xls --root src/main/resources --xls-file i18n.xlsx

  # Export only some bundles
  bundlesheet export-xls -r src/main/resources -i 'i18n/**/*.properties' -e '**/legacy_*'

  # Import, turning keys missing in the sheet into comments
  bundlesheet import-xls -r src/main/resources -x i18n.xlsx --missing-key-action comment

  # List supported formats
  bundlesheet formats
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # export-xls command
    export_parser = subparsers.add_parser("export-xls", help="Export .properties files to XLSX/CSV")
    _add_common_options(export_parser)

    # import-xls command
    import_parser = subparsers.add_parser("import-xls", help="Import XLSX/CSV into .properties files")
    _add_common_options(import_parser)
    import_parser.add_argument("--missing-key-action", "-m",
                               choices=[a.value for a in MissingKeyAction],
                               help="What to do with keys that are missing in the sheet (default: nothing)")

    # formats command
    subparsers.add_parser("formats", help="List supported tabular formats")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "formats":
            result = cmd_formats(args)
        else:
            settings = _settings(args)
            configure_logging(settings.verbose)
            if args.command == "export-xls":
                result = cmd_export(settings)
            else:
                result = cmd_import(settings)
        print(json.dumps(result, indent=2))
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        print(json.dumps({
            "status": "error",
            "error": str(e),
            "error_type": type(e).__name__,
        }), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
