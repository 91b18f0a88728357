"""PortfolioSummary Domain Object - Aggregated portfolio metrics.

Holds the figures derived from a set of positions:
- Totals (invested, current value, profit)
- Sector and currency allocation
- Best and worst performing positions
- Projection and timeline points for charting
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass(frozen=True)
class AllocationSlice:
    """Share of the portfolio held in one bucket (sector or currency).

    Attributes:
        name: Bucket label
        value: Current value held in the bucket
        percent: value / total current value * 100 (0 when total is 0)
    """

    name: str
    value: float
    percent: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"name": self.name, "value": self.value, "percent": self.percent}


@dataclass(frozen=True)
class PositionPerformance:
    """Return and weight figures for one position."""

    isin: str
    name: str
    invested_amount: float
    current_value: float
    profit: float
    profit_percent: float
    weight_percent: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "isin": self.isin,
            "name": self.name,
            "invested_amount": self.invested_amount,
            "current_value": self.current_value,
            "profit": self.profit,
            "profit_percent": self.profit_percent,
            "weight_percent": self.weight_percent,
        }


@dataclass(frozen=True)
class PortfolioSummary:
    """Aggregate view of a portfolio.

    Attributes:
        total_invested: Sum of invested amounts
        total_current_value: Sum of shares * NAV
        profit: total_current_value - total_invested
        profit_percent: profit / total_invested * 100 (0 when nothing invested)
        sector_breakdown: Allocation by category, largest first
        top_performers: Best positions by profit percent
        bottom_performers: Worst positions by profit percent
        currency_exposure: Allocation by currency, largest first
    """

    total_invested: float = 0.0
    total_current_value: float = 0.0
    profit: float = 0.0
    profit_percent: float = 0.0
    sector_breakdown: list[AllocationSlice] = field(default_factory=list)
    top_performers: list[PositionPerformance] = field(default_factory=list)
    bottom_performers: list[PositionPerformance] = field(default_factory=list)
    currency_exposure: list[AllocationSlice] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "total_invested": self.total_invested,
            "total_current_value": self.total_current_value,
            "profit": self.profit,
            "profit_percent": self.profit_percent,
            "sector_breakdown": [s.to_dict() for s in self.sector_breakdown],
            "top_performers": [p.to_dict() for p in self.top_performers],
            "bottom_performers": [p.to_dict() for p in self.bottom_performers],
            "currency_exposure": [c.to_dict() for c in self.currency_exposure],
        }


@dataclass(frozen=True)
class ProjectionPoint:
    """One period of the illustrative compound-growth projection."""

    period_label: str
    projected_value: float


@dataclass(frozen=True)
class TimelinePoint:
    """One point of the estimated portfolio value timeline."""

    date: date
    value: float
