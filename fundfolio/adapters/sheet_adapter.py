"""SheetAdapter - One-shot position import from a Google Sheets CSV export.

Expected column layout (header row skipped):
    0 ISIN, 1 Name, 2 Manager, 3 Category, 4 BuyDate, 5 Invested,
    6 Currency, 7 Shares, 8 Fees, 9 NAV, 10 LastUpdated
"""

from __future__ import annotations

import csv
import io
import logging

import httpx

from fundfolio.core.domain.position import DEFAULT_CURRENCY, Position
from fundfolio.core.numbers import parse_locale_number

logger = logging.getLogger(__name__)

SHEET_CSV_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv"

# Rows shorter than this are dropped
MIN_COLUMNS = 10


class SheetFetchError(Exception):
    """Raised when the spreadsheet export cannot be downloaded."""

    def __init__(self, sheet_id: str, message: str) -> None:
        self.sheet_id = sheet_id
        super().__init__(f"Could not fetch sheet '{sheet_id}': {message}")


class SheetAdapter:
    """Downloads and parses the portfolio spreadsheet."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize SheetAdapter.

        Args:
            client: Optional pre-configured client (used as-is, not closed)
            timeout: Request timeout in seconds
        """
        self._client = client
        self._timeout = timeout

    async def fetch_positions(self, sheet_id: str) -> list[Position]:
        """Download the sheet as CSV and parse it.

        Raises:
            SheetFetchError: If the download fails
        """
        url = SHEET_CSV_URL.format(sheet_id=sheet_id)
        try:
            if self._client is not None:
                response = await self._client.get(url, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise SheetFetchError(sheet_id, str(e)) from e

        return self.parse_csv(response.text)

    @staticmethod
    def parse_csv(csv_text: str) -> list[Position]:
        """Parse CSV text into positions.

        Blank lines and rows with fewer than 10 columns are skipped; rows
        that violate Position invariants are skipped with a warning.
        """
        positions: list[Position] = []
        reader = csv.reader(io.StringIO(csv_text))

        for line_number, row in enumerate(reader, start=1):
            if line_number == 1 or not any(cell.strip() for cell in row):
                continue
            if len(row) < MIN_COLUMNS:
                continue

            cols = [cell.strip() for cell in row] + [""] * (11 - len(row))
            try:
                positions.append(
                    Position(
                        isin=cols[0],
                        name=cols[1],
                        manager=cols[2],
                        category=cols[3],
                        buy_date=cols[4],
                        invested_amount=parse_locale_number(cols[5]),
                        currency=cols[6] or DEFAULT_CURRENCY,
                        shares=parse_locale_number(cols[7]),
                        fees=parse_locale_number(cols[8]),
                        current_nav=parse_locale_number(cols[9]),
                        last_updated=cols[10],
                    )
                )
            except ValueError as e:
                logger.warning("Skipping sheet row %d: %s", line_number, e)

        return positions
