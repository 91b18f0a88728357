"""ValuationPort Protocol - Abstract interface for fund valuation lookups.

This port defines the contract for fetching the latest NAV and recent
history of a fund from an external service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from fundfolio.core.domain.position import Position
    from fundfolio.core.domain.valuation import ValuationQuote


@runtime_checkable
class ValuationPort(Protocol):
    """Abstract interface for valuation lookups.

    Implementations:
    - GeminiValuationAdapter: Production implementation using Gemini with search grounding
    - StubValuationAdapter: Test stub for unit testing

    Callers treat a ``None`` result and a raised exception identically.
    """

    async def fetch_valuation(self, position: "Position") -> "ValuationQuote | None":
        """Fetch the latest NAV and history for a position.

        Args:
            position: Position to value (ISIN and name are used for the query)

        Returns:
            ValuationQuote for the exact ISIN share class, or None if no
            reliable data was found

        Raises:
            ValuationPermissionError: If the service rejects the credentials
            ValuationLookupError: If the lookup fails

        Post-conditions:
            - Quote NAV refers to the position's ISIN share class
        """
        ...


class ValuationLookupError(Exception):
    """Raised when a valuation cannot be obtained for a fund."""

    def __init__(self, isin: str, reason: str = "no data returned") -> None:
        self.isin = isin
        self.reason = reason
        super().__init__(f"Failed to fetch valuation for '{isin}': {reason}")


class ValuationPermissionError(ValuationLookupError):
    """Raised when the valuation service rejects the API key or its tools."""

    def __init__(self, isin: str, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(
            isin,
            f"permission denied (HTTP {status_code}); the API key may not support search grounding",
        )
