"""Portfolio aggregation - Totals, allocation and ranking across positions.

Every ratio is guarded: a zero denominator yields 0, never NaN or Infinity,
so a summary is always safe to render.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import pandas as pd

from fundfolio.core.domain.portfolio_summary import (
    AllocationSlice,
    PortfolioSummary,
    PositionPerformance,
)
from fundfolio.core.domain.position import DEFAULT_CURRENCY

if TYPE_CHECKING:
    from fundfolio.core.domain.position import Position

# Bucket for positions without a category
OTHER_CATEGORY = "Other"

# Number of positions listed as top / bottom performers
DEFAULT_TOP_N = 5


def safe_percent(numerator: float, denominator: float) -> float:
    """Return numerator / denominator * 100, or 0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return numerator / denominator * 100


def position_weight(position: "Position", total_current_value: float) -> float:
    """Return the position's share of the portfolio value in percent."""
    return safe_percent(position.current_value, total_current_value)


def aggregate(
    positions: Sequence["Position"],
    top_n: int = DEFAULT_TOP_N,
) -> PortfolioSummary:
    """Compute the aggregate metrics shown on the dashboard and analysis views.

    Args:
        positions: Positions to aggregate
        top_n: Length of the top and bottom performer lists

    Returns:
        PortfolioSummary; all zeros with empty lists for no positions
    """
    if not positions:
        return PortfolioSummary()

    frame = _positions_frame(positions)

    total_invested = float(frame["invested_amount"].sum())
    total_current_value = float(frame["current_value"].sum())
    profit = total_current_value - total_invested

    performances = [
        PositionPerformance(
            isin=row.isin,
            name=row.name,
            invested_amount=float(row.invested_amount),
            current_value=float(row.current_value),
            profit=float(row.current_value - row.invested_amount),
            profit_percent=safe_percent(
                row.current_value - row.invested_amount, row.invested_amount
            ),
            weight_percent=position_weight(position, total_current_value),
        )
        for position, row in zip(positions, frame.itertuples(index=False))
    ]
    ranked = sorted(performances, key=lambda p: p.profit_percent, reverse=True)

    return PortfolioSummary(
        total_invested=total_invested,
        total_current_value=total_current_value,
        profit=profit,
        profit_percent=safe_percent(profit, total_invested),
        sector_breakdown=_allocation(frame, "category", total_current_value),
        top_performers=ranked[:top_n],
        bottom_performers=list(reversed(ranked))[:top_n],
        currency_exposure=_allocation(frame, "currency", total_current_value),
    )


def _positions_frame(positions: Sequence["Position"]) -> pd.DataFrame:
    """Build one row per position with normalized bucket labels."""
    return pd.DataFrame(
        {
            "isin": [p.isin for p in positions],
            "name": [p.name for p in positions],
            "category": [(p.category or "").strip() or OTHER_CATEGORY for p in positions],
            "currency": [
                (p.currency or "").strip().upper() or DEFAULT_CURRENCY for p in positions
            ],
            "invested_amount": [float(p.invested_amount or 0.0) for p in positions],
            "current_value": [float(p.current_value) for p in positions],
        }
    )


def _allocation(
    frame: pd.DataFrame,
    column: str,
    total_current_value: float,
) -> list[AllocationSlice]:
    """Sum current value per bucket, largest first."""
    grouped = (
        frame.groupby(column, sort=False)["current_value"]
        .sum()
        .sort_values(ascending=False, kind="mergesort")
    )
    return [
        AllocationSlice(
            name=str(name),
            value=float(value),
            percent=safe_percent(float(value), total_current_value),
        )
        for name, value in grouped.items()
    ]
