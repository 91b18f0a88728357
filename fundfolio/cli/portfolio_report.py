#!/usr/bin/env python3
"""Portfolio Report CLI - Summary, allocation and projection of the stored portfolio.

Usage:
    fundfolio-report
    fundfolio-report --years 10 --rate 0.08
    fundfolio-report --json
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date

from fundfolio.adapters.json_storage_adapter import JsonFileStorageAdapter
from fundfolio.config import ConfigurationError, load_settings
from fundfolio.core.services.aggregation_service import aggregate
from fundfolio.core.services.projection_service import (
    estimate_growth_timeline,
    project,
    projection_disclaimer,
)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Report totals, allocation and projection for the stored portfolio",
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
        help="Snapshot file to report on (overrides config)",
    )

    parser.add_argument(
        "--years",
        type=int,
        help="Projection horizon in years (default from config: 15)",
    )

    parser.add_argument(
        "--rate",
        type=float,
        help="Assumed annual growth rate for the projection (default from config: 0.12)",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
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
    snapshot = storage.load()
    positions = list(snapshot.positions)

    years = parsed.years if parsed.years is not None else settings.projection_years
    rate = parsed.rate if parsed.rate is not None else settings.annual_rate

    summary = aggregate(positions, top_n=settings.top_n)
    try:
        projection = project(summary.total_current_value, annual_rate=rate, years=years)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    timeline = estimate_growth_timeline(positions, date.today())

    if parsed.json:
        report = {
            "portfolio_name": snapshot.portfolio_name,
            "last_modified": snapshot.last_modified,
            "summary": summary.to_dict(),
            "projection": [
                {"period": p.period_label, "value": p.projected_value} for p in projection
            ],
            "timeline": [{"date": t.date.isoformat(), "value": t.value} for t in timeline],
            "disclaimer": projection_disclaimer(rate),
        }
        print(json.dumps(report, indent=2))
        return 0

    if snapshot.is_empty:
        print(f"Portfolio '{snapshot.portfolio_name}' has no positions.")
        return 0

    print(f"Portfolio: {snapshot.portfolio_name} ({len(positions)} funds)")
    print(f"Last modified: {snapshot.last_modified}")

    print("\n" + "=" * 50)
    print("SUMMARY")
    print("=" * 50)
    print(f"  Invested:      {summary.total_invested:>14,.2f}")
    print(f"  Current value: {summary.total_current_value:>14,.2f}")
    print(f"  Profit:        {summary.profit:>14,.2f} ({summary.profit_percent:.2f}%)")

    print("\n" + "=" * 50)
    print("SECTOR ALLOCATION")
    print("=" * 50)
    for sector in summary.sector_breakdown:
        print(f"  {sector.name:<30} {sector.value:>14,.2f} {sector.percent:>7.2f}%")

    print("\n" + "=" * 50)
    print("CURRENCY EXPOSURE")
    print("=" * 50)
    for currency in summary.currency_exposure:
        print(f"  {currency.name:<30} {currency.value:>14,.2f} {currency.percent:>7.2f}%")

    print("\n" + "=" * 50)
    print("TOP / BOTTOM PERFORMERS")
    print("=" * 50)
    for label, performers in (("Top", summary.top_performers), ("Bottom", summary.bottom_performers)):
        print(f"  {label}:")
        for p in performers:
            print(f"    {p.isin:<14} {p.name[:30]:<30} {p.profit_percent:>8.2f}%  weight {p.weight_percent:.1f}%")

    print("\n" + "=" * 50)
    print("TIMELINE (estimated)")
    print("=" * 50)
    for point in timeline:
        print(f"  {point.date.isoformat():<10} {point.value:>16,.2f}")

    print("\n" + "=" * 50)
    print(f"PROJECTION ({rate:.0%} per year)")
    print("=" * 50)
    for point in projection:
        print(f"  {point.period_label:<10} {point.projected_value:>16,.2f}")
    print(f"\n{projection_disclaimer(rate)}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
