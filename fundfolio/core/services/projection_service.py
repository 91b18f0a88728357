"""Projection - Illustrative forward and backward value curves.

Neither curve is a forecast or a record of real performance:
- ``project`` compounds the current value at a fixed assumed rate
- ``estimate_growth_timeline`` interpolates from invested amount to
  current value between each buy date and today
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Sequence

import numpy as np
import pandas as pd

from fundfolio.core.domain.portfolio_summary import ProjectionPoint, TimelinePoint

if TYPE_CHECKING:
    from fundfolio.core.domain.position import Position

DEFAULT_ANNUAL_RATE = 0.12
DEFAULT_PROJECTION_YEARS = 15

# Number of points and curve shape of the estimated timeline
DEFAULT_TIMELINE_POINTS = 12
DEFAULT_CURVE_EXPONENT = 1.15

PROJECTION_DISCLAIMER = (
    "Illustrative projection assuming a constant {rate:.0%} annual return. "
    "It has no statistical basis and is not a forecast or a guarantee of future value."
)


def project(
    current_total: float,
    annual_rate: float = DEFAULT_ANNUAL_RATE,
    years: int = DEFAULT_PROJECTION_YEARS,
) -> list[ProjectionPoint]:
    """Compound the current total forward year by year.

    Args:
        current_total: Present portfolio value
        annual_rate: Assumed annual growth rate (0.12 = 12%)
        years: Number of years to project; year 0 is the current total

    Returns:
        ``years + 1`` points labelled "Year 0" .. "Year N"

    Raises:
        ValueError: If years is negative
    """
    if years < 0:
        raise ValueError(f"Projection years must be non-negative. Got: {years}")

    periods = np.arange(years + 1)
    values = current_total * np.power(1.0 + annual_rate, periods)

    return [
        ProjectionPoint(period_label=f"Year {i}", projected_value=float(value))
        for i, value in zip(periods, values)
    ]


def projection_disclaimer(annual_rate: float = DEFAULT_ANNUAL_RATE) -> str:
    """Return the end-user disclaimer for a projection at this rate."""
    return PROJECTION_DISCLAIMER.format(rate=annual_rate)


def estimate_growth_timeline(
    positions: Sequence["Position"],
    as_of: date,
    points: int = DEFAULT_TIMELINE_POINTS,
    curve_exponent: float = DEFAULT_CURVE_EXPONENT,
) -> list[TimelinePoint]:
    """Estimate the portfolio value between the first purchase and ``as_of``.

    Each position contributes from its buy date onward, moving from its
    invested amount towards its current value along ``progress ** exponent``.

    Args:
        positions: Positions to include
        as_of: Last point of the timeline (usually today)
        points: Number of evenly spaced points
        curve_exponent: Shape of the interpolation curve

    Returns:
        Timeline points oldest first; empty if no position has a parseable
        buy date on or before ``as_of``

    Raises:
        ValueError: If fewer than two points are requested
    """
    if points < 2:
        raise ValueError(f"Timeline needs at least 2 points. Got: {points}")

    end = pd.Timestamp(as_of)
    dated: list[tuple[pd.Timestamp, "Position"]] = []
    for position in positions:
        bought = pd.to_datetime(position.buy_date, errors="coerce")
        if pd.isna(bought):
            continue
        if bought.tzinfo is not None:
            bought = bought.tz_localize(None)
        if bought > end:
            continue
        dated.append((bought, position))

    if not dated:
        return []

    start = min(bought for bought, _ in dated)
    timestamps = [start + (end - start) * (i / (points - 1)) for i in range(points)]

    timeline: list[TimelinePoint] = []
    for current in timestamps:
        total = 0.0
        for bought, position in dated:
            if bought > current:
                continue
            span = end - bought
            progress = (current - bought) / span if span > pd.Timedelta(0) else 0.0
            total += position.invested_amount + (
                position.current_value - position.invested_amount
            ) * (progress ** curve_exponent)
        timeline.append(TimelinePoint(date=current.date(), value=total))

    return timeline
