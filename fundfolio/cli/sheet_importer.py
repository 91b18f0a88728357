#!/usr/bin/env python3
"""Sheet Importer CLI - Replace the stored positions with a spreadsheet's rows.

Usage:
    fundfolio-sheet-import --sheet-id 1AbC...xyz
    fundfolio-sheet-import --input funds.csv --name "Family Portfolio"
    fundfolio-sheet-import --input funds.csv --dry-run

Expected columns: ISIN, Name, Manager, Category, BuyDate, Invested,
Currency, Shares, Fees, NAV, LastUpdated (header row required).
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from fundfolio.adapters.json_storage_adapter import JsonFileStorageAdapter
from fundfolio.adapters.sheet_adapter import SheetAdapter, SheetFetchError
from fundfolio.config import ConfigurationError, load_settings
from fundfolio.core.domain.snapshot import PortfolioSnapshot
from fundfolio.core.services.portfolio_service import PortfolioService


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Import positions from a Google Sheet or a CSV file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--sheet-id",
        type=str,
        help="Google Sheets document ID (sheet must be shared publicly)",
    )
    source.add_argument(
        "--input", "-i",
        type=str,
        help="Path to a local CSV export",
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        help="Path to YAML config (default: $FUNDFOLIO_CONFIG or ./fundfolio.yaml)",
    )

    parser.add_argument(
        "--storage",
        type=str,
        help="Snapshot file to write (overrides config)",
    )

    parser.add_argument(
        "--name",
        type=str,
        help="Portfolio name to set (keeps the current name if omitted)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only parse and list the positions, don't save",
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

    adapter = SheetAdapter()

    if parsed.input:
        input_path = Path(parsed.input)
        if not input_path.exists():
            print(f"Error: Input file not found: {parsed.input}", file=sys.stderr)
            return 1
        print(f"Parsing {parsed.input}...")
        positions = adapter.parse_csv(input_path.read_text(encoding="utf-8"))
    else:
        print(f"Downloading sheet {parsed.sheet_id}...")
        try:
            positions = asyncio.run(adapter.fetch_positions(parsed.sheet_id))
        except SheetFetchError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    print(f"Parsed {len(positions)} positions")
    for position in positions:
        print(f"  - {position.isin:<14} {position.name[:40]:<40} {position.current_value:>14,.2f}")

    if parsed.dry_run:
        print("Dry run - not saving")
        return 0

    service = PortfolioService(JsonFileStorageAdapter(parsed.storage or settings.storage_path))
    service.load()

    try:
        snapshot = PortfolioSnapshot(
            portfolio_name=parsed.name or service.portfolio_name,
            positions=tuple(positions),
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    service.import_snapshot(snapshot)

    print(f"Saved {len(positions)} positions to '{service.portfolio_name}'")
    return 0


if __name__ == "__main__":
    sys.exit(main())
