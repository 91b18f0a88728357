"""JsonFileStorageAdapter - Local JSON persistence for the portfolio snapshot.

Provides:
- load/save of the snapshot at a fixed path (StoragePort)
- Export of a pretty-printed copy named after the portfolio and date
- Import of an exported file with format validation
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date
from pathlib import Path
from typing import Any, Sequence

from fundfolio.core.domain.position import Position
from fundfolio.core.domain.snapshot import (
    DEFAULT_PORTFOLIO_NAME,
    SNAPSHOT_VERSION,
    PortfolioSnapshot,
    utc_now_iso,
)
from fundfolio.core.ports.storage_port import SnapshotFormatError, StorageError
from fundfolio.core.services.history_service import rederive_snapshot_history

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


class JsonFileStorageAdapter:
    """Stores the portfolio snapshot as a JSON file on local disk."""

    def __init__(self, path: str | Path) -> None:
        """Initialize JsonFileStorageAdapter.

        Args:
            path: Location of the snapshot file
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> PortfolioSnapshot:
        """Load the stored snapshot.

        A missing or unreadable file yields an empty default snapshot.
        """
        if not self._path.exists():
            return PortfolioSnapshot(portfolio_name=DEFAULT_PORTFOLIO_NAME)

        try:
            return self._decode(self._read_json(self._path), str(self._path))
        except SnapshotFormatError as e:
            logger.error("Could not load stored portfolio: %s", e)
            return PortfolioSnapshot(portfolio_name=DEFAULT_PORTFOLIO_NAME)

    def save(
        self,
        positions: Sequence[Position],
        portfolio_name: str,
    ) -> PortfolioSnapshot:
        """Write the positions as the current snapshot.

        Raises:
            StorageError: If the file cannot be written
            ValueError: If ISINs are not unique
        """
        snapshot = self._build_snapshot(positions, portfolio_name)
        self._write_json(self._path, snapshot.to_dict())
        return snapshot

    def export_snapshot(
        self,
        positions: Sequence[Position],
        portfolio_name: str,
        directory: str | Path,
        *,
        today: date | None = None,
    ) -> Path:
        """Write a pretty-printed export named ``<Name>_<YYYY-MM-DD>.json``.

        Args:
            positions: Positions to export
            portfolio_name: Portfolio name (whitespace becomes underscores)
            directory: Destination directory (created if needed)
            today: Date used in the file name (defaults to today)

        Returns:
            Path of the written file
        """
        snapshot = self._build_snapshot(positions, portfolio_name)
        filename = export_filename(portfolio_name, today or date.today())
        target = Path(directory) / filename
        self._write_json(target, snapshot.to_dict())
        return target

    def import_snapshot(self, path: str | Path) -> PortfolioSnapshot:
        """Read and validate an exported snapshot.

        Raises:
            FileNotFoundError: If the file doesn't exist
            SnapshotFormatError: If the file is not a compatible snapshot
        """
        source = Path(path)
        if not source.exists():
            raise FileNotFoundError(f"Import file not found: {source}")

        return self._decode(self._read_json(source), str(source))

    @staticmethod
    def _build_snapshot(
        positions: Sequence[Position],
        portfolio_name: str,
    ) -> PortfolioSnapshot:
        return PortfolioSnapshot(
            portfolio_name=portfolio_name,
            positions=tuple(positions),
            version=SNAPSHOT_VERSION,
            last_modified=utc_now_iso(),
        )

    @staticmethod
    def _read_json(path: Path) -> Any:
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise SnapshotFormatError(str(path), f"Invalid JSON: {e}") from e
        except UnicodeDecodeError as e:
            raise SnapshotFormatError(str(path), "File is not UTF-8 text") from e

    @staticmethod
    def _write_json(path: Path, data: dict[str, Any]) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise StorageError(str(path), str(e)) from e

    @staticmethod
    def _decode(data: Any, source: str) -> PortfolioSnapshot:
        """Validate raw JSON and rebuild derived history figures."""
        if not isinstance(data, dict) or not isinstance(data.get("funds"), list):
            raise SnapshotFormatError(source, "'funds' must be present and be a list")

        try:
            snapshot = PortfolioSnapshot.from_dict(data)
        except (TypeError, ValueError) as e:
            raise SnapshotFormatError(source, str(e)) from e

        return rederive_snapshot_history(snapshot)


def export_filename(portfolio_name: str, on: date) -> str:
    """Return the export file name for a portfolio on a given date."""
    stem = _WHITESPACE.sub("_", portfolio_name.strip()) or DEFAULT_PORTFOLIO_NAME.replace(" ", "_")
    return f"{stem}_{on.isoformat()}.json"
