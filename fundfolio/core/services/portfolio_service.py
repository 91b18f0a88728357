"""PortfolioService - Domain service for the position lifecycle.

This service coordinates:
1. Loading the stored snapshot
2. Adding, editing, deleting and renaming, each persisted once
3. Committing refresh and import results in a single save
4. Summary and projection views over the current positions
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from fundfolio.core.domain.snapshot import DEFAULT_PORTFOLIO_NAME
from fundfolio.core.ports.event_port import EventLevel, NullEventSink
from fundfolio.core.services.aggregation_service import DEFAULT_TOP_N, aggregate
from fundfolio.core.services.history_service import rederive_position_history
from fundfolio.core.services.projection_service import (
    DEFAULT_ANNUAL_RATE,
    DEFAULT_PROJECTION_YEARS,
    project,
)

if TYPE_CHECKING:
    from fundfolio.core.domain.portfolio_summary import PortfolioSummary, ProjectionPoint
    from fundfolio.core.domain.position import Position
    from fundfolio.core.domain.snapshot import PortfolioSnapshot
    from fundfolio.core.ports.event_port import EventSink
    from fundfolio.core.ports.storage_port import StoragePort

logger = logging.getLogger(__name__)


class DuplicatePositionError(Exception):
    """Raised when adding a position whose ISIN is already held."""

    def __init__(self, isin: str) -> None:
        self.isin = isin
        super().__init__(f"Position '{isin}' already exists in the portfolio")


class PositionNotFoundError(Exception):
    """Raised when editing or deleting an ISIN that is not held."""

    def __init__(self, isin: str) -> None:
        self.isin = isin
        super().__init__(f"Position '{isin}' not found in the portfolio")


class PortfolioService:
    """Owns the in-memory position list and persists every change.

    The list is only ever changed by whole-item replacement, so readers see
    a position either before or after an update.
    """

    def __init__(
        self,
        storage_port: "StoragePort",
        event_sink: "EventSink | None" = None,
    ) -> None:
        """Initialize PortfolioService.

        Args:
            storage_port: Port used to load and save the snapshot
            event_sink: Sink for user-facing activity events
        """
        self._storage = storage_port
        self._events = event_sink or NullEventSink()
        self._positions: list["Position"] = []
        self._portfolio_name = ""
        self._last_modified: str | None = None

    @property
    def positions(self) -> list["Position"]:
        """Return a copy of the current positions."""
        return list(self._positions)

    @property
    def portfolio_name(self) -> str:
        return self._portfolio_name

    @property
    def last_modified(self) -> str | None:
        return self._last_modified

    def load(self) -> "PortfolioSnapshot":
        """Load the stored snapshot into the service."""
        snapshot = self._storage.load()
        self._positions = list(snapshot.positions)
        self._portfolio_name = snapshot.portfolio_name
        self._last_modified = snapshot.last_modified

        if snapshot.is_empty:
            self._events.emit(EventLevel.INFO, "Empty portfolio detected.")
        else:
            self._events.emit(
                EventLevel.SUCCESS,
                f"Portfolio '{snapshot.portfolio_name}' loaded "
                f"({len(snapshot.positions)} funds).",
            )
        return snapshot

    def get_position(self, isin: str) -> "Position":
        """Return the position for an ISIN.

        Raises:
            PositionNotFoundError: If the ISIN is not held
        """
        return self._positions[self._index_of(isin)]

    def add_position(self, position: "Position") -> None:
        """Append a new position.

        Raises:
            DuplicatePositionError: If the ISIN is already held
        """
        if any(p.isin == position.isin for p in self._positions):
            raise DuplicatePositionError(position.isin)

        self._commit([*self._positions, position])
        self._events.emit(EventLevel.SUCCESS, f"Added {position.isin}")

    def edit_position(self, position: "Position") -> None:
        """Replace the position with the same ISIN.

        History values are re-derived when the share count changed.

        Raises:
            PositionNotFoundError: If the ISIN is not held
        """
        index = self._index_of(position.isin)
        if position.shares != self._positions[index].shares:
            position = rederive_position_history(position)

        positions = list(self._positions)
        positions[index] = position
        self._commit(positions)
        self._events.emit(EventLevel.INFO, f"Edited {position.isin}")

    def delete_position(self, isin: str) -> None:
        """Remove the position with this ISIN.

        Raises:
            PositionNotFoundError: If the ISIN is not held
        """
        index = self._index_of(isin)
        self._commit(self._positions[:index] + self._positions[index + 1 :])
        self._events.emit(EventLevel.WARNING, f"Deleted {isin}")

    def rename(self, portfolio_name: str) -> None:
        """Change the portfolio name."""
        self._commit(self._positions, portfolio_name.strip())

    def replace_positions(self, positions: Sequence["Position"]) -> None:
        """Replace the whole list in one save (refresh or sheet import result).

        Raises:
            ValueError: If ISINs are not unique
        """
        self._commit(list(positions))

    def import_snapshot(self, snapshot: "PortfolioSnapshot") -> None:
        """Adopt an imported snapshot's name and positions."""
        self._commit(list(snapshot.positions), snapshot.portfolio_name)
        self._events.emit(
            EventLevel.SUCCESS, f"Portfolio '{snapshot.portfolio_name}' imported."
        )

    def summary(self, top_n: int = DEFAULT_TOP_N) -> "PortfolioSummary":
        """Return aggregate metrics for the current positions."""
        return aggregate(self._positions, top_n=top_n)

    def projection(
        self,
        annual_rate: float = DEFAULT_ANNUAL_RATE,
        years: int = DEFAULT_PROJECTION_YEARS,
    ) -> list["ProjectionPoint"]:
        """Return the illustrative growth projection of the current value."""
        total = sum(p.current_value for p in self._positions)
        return project(total, annual_rate=annual_rate, years=years)

    def _index_of(self, isin: str) -> int:
        for i, position in enumerate(self._positions):
            if position.isin == isin:
                return i
        raise PositionNotFoundError(isin)

    def _commit(
        self,
        positions: list["Position"],
        portfolio_name: str | None = None,
    ) -> None:
        """Save first, then adopt the new state, so a failed save changes nothing."""
        name = self._portfolio_name if portfolio_name is None else portfolio_name
        name = name or DEFAULT_PORTFOLIO_NAME
        snapshot = self._storage.save(positions, name)

        self._positions = list(positions)
        self._portfolio_name = name
        self._last_modified = snapshot.last_modified
        logger.debug("Saved %d positions", len(positions))
