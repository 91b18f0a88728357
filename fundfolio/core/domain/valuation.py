"""ValuationQuote Domain Object - A valuation lookup result.

Models the payload returned by the external valuation service:
``{"current": {"nav": ..., "date": ...}, "history": [{"date": ..., "nav": ...}]}``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ValuationQuote:
    """Latest NAV plus raw history for one fund.

    Attributes:
        nav: Latest NAV per share
        date: Date of the latest NAV (as reported)
        history: Raw observations, each a mapping with ``date`` and ``nav``

    Invariants:
        - nav must be finite and non-negative
        - history entries must be mappings
    """

    nav: float
    date: str
    history: tuple[dict[str, Any], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate invariants after initialization."""
        if not math.isfinite(self.nav):
            raise ValueError(f"Quote NAV must be a finite number. Got: {self.nav}")
        if self.nav < 0:
            raise ValueError(f"Quote NAV must be non-negative. Got: {self.nav}")
        if any(not isinstance(point, dict) for point in self.history):
            raise ValueError("Quote history entries must be objects with 'date' and 'nav'")

    @classmethod
    def from_payload(cls, payload: Any) -> "ValuationQuote":
        """Build a quote from the lookup service payload.

        Raises:
            ValueError: If the payload lacks a usable ``current`` block
        """
        if not isinstance(payload, dict):
            raise ValueError("Valuation payload must be an object")

        current = payload.get("current")
        if not isinstance(current, dict) or "nav" not in current:
            raise ValueError("Valuation payload is missing 'current.nav'")

        try:
            nav = float(current["nav"])
        except (TypeError, ValueError) as e:
            raise ValueError(f"Valuation payload NAV is not numeric: {current['nav']!r}") from e

        history = payload.get("history") or []
        if not isinstance(history, list):
            raise ValueError("Valuation payload 'history' must be a list")

        return cls(
            nav=nav,
            date=str(current.get("date") or ""),
            history=tuple(point for point in history if isinstance(point, dict)),
        )
