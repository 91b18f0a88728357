"""History derivation - Turns raw (date, nav) observations into history points.

For each observation the series carries:
1. The valuation of the position at that NAV (nav * shares)
2. The year-to-date return against the first NAV observed in that calendar year
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any, Iterable, Mapping

import numpy as np
import pandas as pd

from fundfolio.core.domain.position import HistoryPoint

if TYPE_CHECKING:
    from fundfolio.core.domain.position import Position
    from fundfolio.core.domain.snapshot import PortfolioSnapshot


def derive_history(
    raw_points: Iterable[Mapping[str, Any]],
    position: "Position",
) -> list[HistoryPoint]:
    """Derive value and YTD figures from raw NAV observations.

    Pure transform: the same raw points and share count always produce the
    same output.

    Args:
        raw_points: Observations with ``date`` and ``nav`` keys, any order
        position: Position whose share count values each observation

    Returns:
        History points in ascending date order. Observations with an
        unparseable date are dropped; missing, non-numeric or non-finite NAVs
        count as 0. Zoned timestamps are read in UTC.
    """
    records = [
        {"date": point.get("date"), "nav": point.get("nav")}
        for point in raw_points
        if isinstance(point, Mapping)
    ]
    if not records:
        return []

    frame = pd.DataFrame.from_records(records, columns=["date", "nav"])
    # Zoned and naive stamps may be mixed; compare them all as UTC wall time
    frame["date"] = pd.to_datetime(
        frame["date"], errors="coerce", format="mixed", utc=True
    ).dt.tz_localize(None)
    frame = frame.dropna(subset=["date"])
    if frame.empty:
        return []

    frame["nav"] = (
        pd.to_numeric(frame["nav"], errors="coerce")
        .replace([np.inf, -np.inf], np.nan)
        .fillna(0.0)
        .astype(float)
    )
    frame = frame.sort_values("date", kind="mergesort").reset_index(drop=True)

    # Year-open price: NAV of the first observation in each calendar year
    year_open = frame.groupby(frame["date"].dt.year)["nav"].transform("first")

    shares = position.shares or 0.0
    history: list[HistoryPoint] = []
    for timestamp, nav, open_nav in zip(frame["date"], frame["nav"], year_open):
        ytd = (nav - open_nav) / open_nav * 100 if open_nav > 0 else 0.0
        history.append(
            HistoryPoint(
                date=timestamp.date(),
                nav=float(nav),
                value=float(nav * shares),
                ytd_percent=float(ytd),
            )
        )

    return history


def rederive_position_history(position: "Position") -> "Position":
    """Return the position with its history recomputed for its current share count."""
    if not position.history:
        return position
    return replace(position, history=tuple(derive_history(position.raw_history(), position)))


def rederive_snapshot_history(snapshot: "PortfolioSnapshot") -> "PortfolioSnapshot":
    """Return the snapshot with every position's history recomputed."""
    return replace(
        snapshot,
        positions=tuple(rederive_position_history(p) for p in snapshot.positions),
    )
