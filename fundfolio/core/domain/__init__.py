"""Domain objects for fundfolio.

This module exports all domain objects representing core business entities.
These are pure domain objects with invariant validation - no I/O dependencies.
"""

from fundfolio.core.domain.portfolio_summary import (
    AllocationSlice,
    PortfolioSummary,
    PositionPerformance,
    ProjectionPoint,
    TimelinePoint,
)
from fundfolio.core.domain.position import DEFAULT_CURRENCY, HistoryPoint, Position
from fundfolio.core.domain.snapshot import (
    DEFAULT_PORTFOLIO_NAME,
    SNAPSHOT_VERSION,
    PortfolioSnapshot,
)
from fundfolio.core.domain.valuation import ValuationQuote

__all__ = [
    # Position
    "Position",
    "HistoryPoint",
    "DEFAULT_CURRENCY",
    # Snapshot
    "PortfolioSnapshot",
    "SNAPSHOT_VERSION",
    "DEFAULT_PORTFOLIO_NAME",
    # Valuation
    "ValuationQuote",
    # Summary
    "PortfolioSummary",
    "AllocationSlice",
    "PositionPerformance",
    "ProjectionPoint",
    "TimelinePoint",
]
