#!/usr/bin/env python3
"""Refresh Runner CLI - Update every fund's NAV and history from the valuation service.

Usage:
    fundfolio-refresh
    fundfolio-refresh --policy rollback
    fundfolio-refresh --config fundfolio.yaml --storage portfolio.json

The Gemini API key is read from the environment variable named in the
config (default: GEMINI_API_KEY). Funds are refreshed one at a time; the
batch stops at the first fund that cannot be valued.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from fundfolio.adapters.event_log_adapter import InMemoryEventLog
from fundfolio.adapters.gemini_valuation_adapter import GeminiValuationAdapter
from fundfolio.adapters.json_storage_adapter import JsonFileStorageAdapter
from fundfolio.config import ConfigurationError, Settings, load_settings
from fundfolio.core.services.portfolio_service import PortfolioService
from fundfolio.core.services.refresh_service import (
    FailurePolicy,
    RefreshOrchestrator,
    RefreshOutcome,
    RefreshProgress,
    RefreshState,
)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Refresh fund valuations from the valuation service",
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
        help="Snapshot file to refresh (overrides config)",
    )

    parser.add_argument(
        "--policy",
        type=str,
        choices=[p.value for p in FailurePolicy],
        help="What to keep when a lookup fails (default from config: keep_partial)",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def print_progress(progress: RefreshProgress) -> None:
    """Print one progress line."""
    print(f"  [{progress.index}/{progress.total}] {progress.isin}...")


async def run_refresh(
    service: PortfolioService,
    orchestrator: RefreshOrchestrator,
) -> RefreshOutcome:
    """Refresh the loaded positions and persist the outcome once."""
    outcome = await orchestrator.refresh_all(service.positions, on_progress=print_progress)

    if outcome.state is not RefreshState.IDLE and outcome.updated_count > 0:
        service.replace_positions(outcome.positions)

    return outcome


def main(args: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        args: Command line arguments

    Returns:
        Exit code (0 for success)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings: Settings = load_settings(parsed.config)
    except (FileNotFoundError, ConfigurationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    api_key = settings.api_key
    if not api_key:
        print(
            f"Error: set {settings.api_key_env} to a Gemini API key with search access",
            file=sys.stderr,
        )
        return 1

    policy = FailurePolicy(parsed.policy) if parsed.policy else settings.failure_policy
    events = InMemoryEventLog(settings.max_log_entries)

    service = PortfolioService(
        JsonFileStorageAdapter(parsed.storage or settings.storage_path),
        event_sink=events,
    )
    service.load()

    if not service.positions:
        print("Portfolio is empty - nothing to refresh.")
        return 0

    orchestrator = RefreshOrchestrator(
        GeminiValuationAdapter(
            api_key,
            settings.model,
            timeout=settings.lookup_timeout,
            history_months=settings.history_months,
        ),
        event_sink=events,
        failure_policy=policy,
    )

    print(f"Refreshing {len(service.positions)} funds...")
    outcome = asyncio.run(run_refresh(service, orchestrator))

    if outcome.succeeded:
        print(f"Refreshed {outcome.updated_count} funds.")
        return 0

    print(f"Error: {outcome.error}", file=sys.stderr)
    if policy is FailurePolicy.KEEP_PARTIAL and outcome.updated_count:
        print(f"Kept {outcome.updated_count} funds refreshed before the failure.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
