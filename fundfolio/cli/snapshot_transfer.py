#!/usr/bin/env python3
"""Snapshot Transfer CLI - Export the portfolio to, or import it from, a JSON file.

Usage:
    fundfolio-transfer export --output-dir backups
    fundfolio-transfer import --input backups/My_Portfolio_2026-01-14.json
"""

from __future__ import annotations

import argparse
import sys

from fundfolio.adapters.json_storage_adapter import JsonFileStorageAdapter
from fundfolio.config import ConfigurationError, load_settings
from fundfolio.core.ports.storage_port import SnapshotFormatError, StorageError
from fundfolio.core.services.portfolio_service import PortfolioService


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Export or import a portfolio snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        help="Path to YAML config (default: $FUNDFOLIO_CONFIG or ./fundfolio.yaml)",
    )

    parser.add_argument(
        "--storage",
        type=str,
        help="Snapshot file (overrides config)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    export_cmd = commands.add_parser("export", help="Write a dated JSON backup")
    export_cmd.add_argument(
        "--output-dir", "-o",
        type=str,
        help="Directory for the export (default from config)",
    )

    import_cmd = commands.add_parser("import", help="Replace the portfolio with a JSON backup")
    import_cmd.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Exported JSON file",
    )

    return parser


def main(args: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        args: Command line arguments

    Returns:
        Exit code (0 for success)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    try:
        settings = load_settings(parsed.config)
    except (FileNotFoundError, ConfigurationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    storage = JsonFileStorageAdapter(parsed.storage or settings.storage_path)

    if parsed.command == "export":
        snapshot = storage.load()
        try:
            target = storage.export_snapshot(
                snapshot.positions,
                snapshot.portfolio_name,
                parsed.output_dir or settings.export_dir,
            )
        except StorageError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"Exported {len(snapshot.positions)} funds to {target}")
        return 0

    try:
        imported = storage.import_snapshot(parsed.input)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except SnapshotFormatError as e:
        print(f"Error: incompatible file. {e.reason}", file=sys.stderr)
        return 1

    service = PortfolioService(storage)
    service.import_snapshot(imported)
    print(f"Imported '{imported.portfolio_name}' ({len(imported.positions)} funds)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
