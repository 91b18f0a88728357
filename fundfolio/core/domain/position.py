"""Position Domain Object - A held fund with its valuation history.

Represents a single investment fund with:
- Static purchase data (ISIN, invested amount, buy date)
- Current valuation (shares, NAV, last update)
- Derived history points for charting
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any

# Default currency for positions entered without one
DEFAULT_CURRENCY = "EUR"


@dataclass(frozen=True)
class HistoryPoint:
    """A derived valuation observation.

    Attributes:
        date: Calendar date of the observation
        nav: Net asset value per share on that date
        value: nav * shares held
        ytd_percent: Return relative to the first NAV observed that year
    """

    date: date
    nav: float
    value: float
    ytd_percent: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "date": self.date.isoformat(),
            "nav": self.nav,
            "value": self.value,
            "ytdPercent": self.ytd_percent,
        }


@dataclass(frozen=True)
class Position:
    """A fund held in the portfolio.

    Positions are immutable: edits and refreshes produce a new Position via
    ``dataclasses.replace`` so NAV, update date and history always change
    together.

    Attributes:
        isin: International Securities Identification Number (unique key)
        name: Display name
        manager: Issuing fund manager
        category: Sector/category label
        buy_date: Purchase date as recorded (ISO string expected)
        invested_amount: Amount invested in the position's currency
        currency: Currency code
        shares: Number of shares held
        fees: Fee rate
        current_nav: Latest NAV per share
        last_updated: Date of the latest NAV as recorded
        history: Derived valuation history, oldest first

    Invariants:
        - isin must not be empty
        - invested_amount, shares and current_nav must be finite and non-negative
        - current_value is always shares * current_nav (never stored)
    """

    isin: str
    name: str = ""
    manager: str = ""
    category: str = ""
    buy_date: str = ""
    invested_amount: float = 0.0
    currency: str = DEFAULT_CURRENCY
    shares: float = 0.0
    fees: float = 0.0
    current_nav: float = 0.0
    last_updated: str = ""
    history: tuple[HistoryPoint, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate invariants after initialization."""
        self._validate_invariants()

    def _validate_invariants(self) -> None:
        """Validate all domain invariants.

        Raises:
            ValueError: If any invariant is violated
        """
        if not self.isin or not self.isin.strip():
            raise ValueError("Position ISIN must not be empty")

        for label, amount in (
            ("invested_amount", self.invested_amount),
            ("shares", self.shares),
            ("current_nav", self.current_nav),
        ):
            if not math.isfinite(amount):
                raise ValueError(
                    f"Position '{self.isin}' {label} must be a finite number. Got: {amount}"
                )
            if amount < 0:
                raise ValueError(
                    f"Position '{self.isin}' {label} must be non-negative. Got: {amount}"
                )

    @property
    def current_value(self) -> float:
        """Return the market value of the position (shares * NAV)."""
        return self.shares * self.current_nav

    @property
    def profit(self) -> float:
        """Return the unrealised profit against the invested amount."""
        return self.current_value - self.invested_amount

    @property
    def profit_percent(self) -> float:
        """Return profit as a percentage of the invested amount (0 if nothing invested)."""
        if self.invested_amount <= 0:
            return 0.0
        return self.profit / self.invested_amount * 100

    def raw_history(self) -> list[dict[str, Any]]:
        """Return the raw (date, nav) observations behind the derived history."""
        return [{"date": point.date.isoformat(), "nav": point.nav} for point in self.history]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "isin": self.isin,
            "name": self.name,
            "manager": self.manager,
            "category": self.category,
            "buyDate": self.buy_date,
            "investedAmount": self.invested_amount,
            "currency": self.currency,
            "shares": self.shares,
            "fees": self.fees,
            "currentNAV": self.current_nav,
            "lastUpdated": self.last_updated,
            "history": [point.to_dict() for point in self.history],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Position":
        """Create a Position from its serialized form.

        History entries are read as-is; callers re-derive value and YTD
        figures from the raw (date, nav) pairs.

        Raises:
            ValueError: If required fields are missing or invariants fail
        """
        if not isinstance(data, dict):
            raise ValueError(f"Position entry must be an object. Got: {type(data).__name__}")

        history = tuple(
            point
            for point in (_history_point_from_dict(raw) for raw in data.get("history") or [])
            if point is not None
        )

        return cls(
            isin=str(data.get("isin") or ""),
            name=str(data.get("name") or ""),
            manager=str(data.get("manager") or ""),
            category=str(data.get("category") or ""),
            buy_date=str(data.get("buyDate") or ""),
            invested_amount=float(data.get("investedAmount") or 0.0),
            currency=str(data.get("currency") or DEFAULT_CURRENCY),
            shares=float(data.get("shares") or 0.0),
            fees=float(data.get("fees") or 0.0),
            current_nav=float(data.get("currentNAV") or 0.0),
            last_updated=str(data.get("lastUpdated") or ""),
            history=history,
        )


def _history_point_from_dict(raw: Any) -> HistoryPoint | None:
    """Read a stored history entry, skipping entries without a usable ISO date."""
    if not isinstance(raw, dict):
        return None
    try:
        point_date = date.fromisoformat(str(raw.get("date"))[:10])
    except ValueError:
        return None

    return HistoryPoint(
        date=point_date,
        nav=_as_float(raw.get("nav")),
        value=_as_float(raw.get("value")),
        ytd_percent=_as_float(raw.get("ytdPercent")),
    )


def _as_float(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0
