"""RefreshOrchestrator - Sequential valuation refresh for a portfolio.

This service coordinates:
1. One valuation lookup per position, strictly in list order
2. Whole-item replacement of NAV, update date and derived history
3. Progress reporting between lookups
4. Abort on the first failed lookup, with a configurable failure policy
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Callable, Sequence

from fundfolio.core.ports.event_port import EventLevel, NullEventSink
from fundfolio.core.ports.valuation_port import (
    ValuationLookupError,
    ValuationPermissionError,
)
from fundfolio.core.services.history_service import derive_history

if TYPE_CHECKING:
    from fundfolio.core.domain.position import Position
    from fundfolio.core.domain.valuation import ValuationQuote
    from fundfolio.core.ports.event_port import EventSink
    from fundfolio.core.ports.valuation_port import ValuationPort

logger = logging.getLogger(__name__)


class RefreshState(Enum):
    """Refresh lifecycle: IDLE -> RUNNING -> (SUCCESS | FAILED) -> IDLE."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class FailurePolicy(Enum):
    """What a failed batch hands back to the caller."""

    # Positions refreshed before the failure stay refreshed
    KEEP_PARTIAL = "keep_partial"
    # The pre-batch positions are returned unchanged
    ROLLBACK = "rollback"


@dataclass(frozen=True)
class RefreshProgress:
    """Progress event emitted before each lookup.

    Attributes:
        index: 1-based position of the fund being refreshed
        total: Number of funds in the batch
        isin: Identifier of the fund being refreshed
    """

    index: int
    total: int
    isin: str


@dataclass
class RefreshOutcome:
    """Result of a refresh batch.

    Attributes:
        state: SUCCESS, FAILED, or IDLE when there was nothing to refresh
        positions: Full position list to hand to persistence, in input order
        updated_count: Number of positions refreshed in this batch
        failed_isin: Identifier whose lookup aborted the batch
        error: Description of the failure
    """

    state: RefreshState
    positions: list["Position"] = field(default_factory=list)
    updated_count: int = 0
    failed_isin: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        """Return True if every position was refreshed."""
        return self.state is RefreshState.SUCCESS


class RefreshInProgressError(Exception):
    """Raised when a refresh is requested while another one is running."""

    def __init__(self) -> None:
        super().__init__("A refresh is already in progress")


class RefreshOrchestrator:
    """Refreshes position valuations one lookup at a time.

    At most one batch runs at a time. Lookups are never fanned out in
    parallel; the valuation service has unknown rate limits.
    """

    def __init__(
        self,
        valuation_port: "ValuationPort",
        event_sink: "EventSink | None" = None,
        failure_policy: FailurePolicy = FailurePolicy.KEEP_PARTIAL,
    ) -> None:
        """Initialize RefreshOrchestrator.

        Args:
            valuation_port: Port used to look up each fund
            event_sink: Sink for user-facing activity events
            failure_policy: What to return when a batch aborts
        """
        self._valuation_port = valuation_port
        self._events = event_sink or NullEventSink()
        self._failure_policy = failure_policy
        self._state = RefreshState.IDLE

    @property
    def state(self) -> RefreshState:
        """Return IDLE, or RUNNING while a batch is in flight."""
        return self._state

    @property
    def failure_policy(self) -> FailurePolicy:
        return self._failure_policy

    async def refresh_all(
        self,
        positions: Sequence["Position"],
        on_progress: Callable[[RefreshProgress], None] | None = None,
    ) -> RefreshOutcome:
        """Refresh every position in order, aborting on the first failure.

        Args:
            positions: Positions to refresh (not modified)
            on_progress: Called with a RefreshProgress before each lookup

        Returns:
            RefreshOutcome with the list to persist

        Raises:
            RefreshInProgressError: If another batch is running
        """
        if self._state is RefreshState.RUNNING:
            raise RefreshInProgressError()

        original = list(positions)
        if not original:
            return RefreshOutcome(state=RefreshState.IDLE, positions=[])

        self._state = RefreshState.RUNNING
        total = len(original)
        updated = list(original)
        self._events.emit(EventLevel.INFO, f"Starting refresh of {total} funds...")

        try:
            for i, position in enumerate(original):
                if on_progress is not None:
                    on_progress(RefreshProgress(index=i + 1, total=total, isin=position.isin))

                started = time.perf_counter()
                try:
                    updated[i] = await self.refresh_position(position)
                except ValuationLookupError as e:
                    return self._abort(original, updated, i, e)

                duration = time.perf_counter() - started
                self._events.emit(
                    EventLevel.SUCCESS,
                    f"[{i + 1}/{total}] {position.isin} refreshed in {duration:.2f}s",
                )
                # Let the caller repaint progress between lookups
                await asyncio.sleep(0)
        finally:
            self._state = RefreshState.IDLE

        self._events.emit(EventLevel.SUCCESS, "Refresh completed successfully.")
        return RefreshOutcome(
            state=RefreshState.SUCCESS,
            positions=updated,
            updated_count=total,
        )

    async def refresh_position(self, position: "Position") -> "Position":
        """Look up one position and return it with the new valuation applied.

        Args:
            position: Position to refresh

        Returns:
            New Position with NAV, update date and history replaced together

        Raises:
            ValuationLookupError: If the lookup returns nothing, raises, or
                returns data the position cannot accept
        """
        try:
            quote = await self._valuation_port.fetch_valuation(position)
        except ValuationLookupError:
            raise
        except Exception as e:
            raise ValuationLookupError(position.isin, str(e) or type(e).__name__) from e

        if quote is None:
            raise ValuationLookupError(position.isin)

        try:
            return apply_quote(position, quote)
        except ValueError as e:
            raise ValuationLookupError(position.isin, str(e)) from e

    def _abort(
        self,
        original: list["Position"],
        updated: list["Position"],
        index: int,
        error: ValuationLookupError,
    ) -> RefreshOutcome:
        """Build the FAILED outcome for a lookup error at ``index``."""
        isin = original[index].isin
        message = f"Failed to fetch data for {isin}. Refresh aborted."

        if isinstance(error, ValuationPermissionError):
            self._events.emit(
                EventLevel.ERROR,
                "Permission error: the API key does not support search grounding. "
                "Configure a key with search access.",
            )
        self._events.emit(EventLevel.ERROR, message)
        logger.warning("Refresh aborted at %s: %s", isin, error.reason)

        if self._failure_policy is FailurePolicy.ROLLBACK:
            positions, updated_count = list(original), 0
        else:
            positions, updated_count = list(updated), index

        return RefreshOutcome(
            state=RefreshState.FAILED,
            positions=positions,
            updated_count=updated_count,
            failed_isin=isin,
            error=f"{message} ({error.reason})",
        )


def apply_quote(position: "Position", quote: "ValuationQuote") -> "Position":
    """Return the position with the quote's NAV, date and derived history.

    Raises:
        ValueError: If the quote would violate a Position invariant
    """
    return replace(
        position,
        current_nav=quote.nav,
        last_updated=quote.date,
        history=tuple(derive_history(quote.history, position)),
    )
