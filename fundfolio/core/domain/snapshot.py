"""PortfolioSnapshot Domain Object - The persisted unit of a portfolio.

A snapshot carries the schema version, portfolio name, last-modified
timestamp and the ordered positions. It is the unit of save, load,
export and import.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from fundfolio.core.domain.position import Position

# Current on-disk schema version
SNAPSHOT_VERSION = 1

# Name given to a portfolio that has never been named
DEFAULT_PORTFOLIO_NAME = "My Portfolio"


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Full persisted state of a portfolio.

    Attributes:
        portfolio_name: Free-text portfolio name
        positions: Ordered positions
        version: Schema version tag
        last_modified: ISO-8601 timestamp of the last save

    Invariants:
        - ISINs are unique within the snapshot
        - version is a positive integer
    """

    portfolio_name: str = DEFAULT_PORTFOLIO_NAME
    positions: tuple[Position, ...] = field(default_factory=tuple)
    version: int = SNAPSHOT_VERSION
    last_modified: str = field(default_factory=utc_now_iso)

    def __post_init__(self) -> None:
        """Validate invariants after initialization."""
        self._validate_invariants()

    def _validate_invariants(self) -> None:
        """Validate all domain invariants.

        Raises:
            ValueError: If any invariant is violated
        """
        if self.version < 1:
            raise ValueError(f"Snapshot version must be positive. Got: {self.version}")

        seen: set[str] = set()
        duplicates: list[str] = []
        for position in self.positions:
            if position.isin in seen:
                duplicates.append(position.isin)
            seen.add(position.isin)

        if duplicates:
            raise ValueError(f"Snapshot ISINs must be unique. Duplicates: {duplicates}")

    @property
    def is_empty(self) -> bool:
        """Return True if the portfolio holds no positions."""
        return len(self.positions) == 0

    def get_position(self, isin: str) -> Position | None:
        """Return the position for an ISIN, or None if not held."""
        for position in self.positions:
            if position.isin == isin:
                return position
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "version": self.version,
            "portfolioName": self.portfolio_name,
            "lastModified": self.last_modified,
            "funds": [position.to_dict() for position in self.positions],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PortfolioSnapshot":
        """Create a snapshot from its serialized form.

        Raises:
            ValueError: If ``funds`` is not a list or any position is invalid
        """
        funds = data.get("funds")
        if not isinstance(funds, list):
            raise ValueError("Snapshot 'funds' must be a list")

        return cls(
            portfolio_name=str(data.get("portfolioName") or DEFAULT_PORTFOLIO_NAME),
            positions=tuple(Position.from_dict(entry) for entry in funds),
            version=int(data.get("version") or SNAPSHOT_VERSION),
            last_modified=str(data.get("lastModified") or utc_now_iso()),
        )
