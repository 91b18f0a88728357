"""StoragePort Protocol - Abstract interface for portfolio persistence.

This port defines the contract for loading and saving the portfolio
snapshot on the local device.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from fundfolio.core.domain.position import Position
    from fundfolio.core.domain.snapshot import PortfolioSnapshot


@runtime_checkable
class StoragePort(Protocol):
    """Abstract interface for snapshot persistence.

    Implementations:
    - JsonFileStorageAdapter: JSON file on local disk
    - StubStorageAdapter: In-memory test stub
    """

    def load(self) -> "PortfolioSnapshot":
        """Load the stored snapshot.

        Returns:
            The stored snapshot, or an empty default snapshot if nothing
            has been saved yet

        Post-conditions:
            - Position histories are re-derived from their raw observations
        """
        ...

    def save(
        self,
        positions: Sequence["Position"],
        portfolio_name: str,
    ) -> "PortfolioSnapshot":
        """Persist positions under a portfolio name.

        Args:
            positions: Ordered positions to store
            portfolio_name: Free-text portfolio name

        Returns:
            The snapshot that was written (with a fresh last_modified stamp)

        Raises:
            StorageError: If the snapshot cannot be written
            ValueError: If ISINs are not unique
        """
        ...


class StorageError(Exception):
    """Raised when the snapshot cannot be written to storage."""

    def __init__(self, location: str, message: str) -> None:
        self.location = location
        super().__init__(f"Storage error at '{location}': {message}")


class SnapshotFormatError(Exception):
    """Raised when an imported file is not a compatible portfolio snapshot."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Incompatible file '{source}': {reason}")
