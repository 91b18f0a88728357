"""Unit tests for SheetAdapter."""

import httpx
import pytest

from fundfolio.adapters.sheet_adapter import SheetAdapter, SheetFetchError

HEADER = "ISIN,Name,Manager,Category,BuyDate,Invested,Currency,Shares,Fees,NAV,LastUpdated"


class TestParseCsv:
    """Test CSV parsing."""

    def test_parses_rows(self) -> None:
        """Each data row becomes a position; the header is skipped."""
        csv_text = "\n".join([
            HEADER,
            'IE00B4L5Y983,iShares World,BlackRock,Equity,2023-01-15,"15.000,00",EUR,"185,5",0.2,"98,45",2026-01-14',
            'LU0996179007,Amundi EM,Amundi,Emerging,2024-03-01,"2,500.00",USD,100,0.1,25.5,2026-01-10',
        ])

        positions = SheetAdapter.parse_csv(csv_text)

        assert [p.isin for p in positions] == ["IE00B4L5Y983", "LU0996179007"]
        first = positions[0]
        assert first.name == "iShares World"
        assert first.manager == "BlackRock"
        assert first.invested_amount == pytest.approx(15000.0)
        assert first.shares == pytest.approx(185.5)
        assert first.current_nav == pytest.approx(98.45)
        assert first.last_updated == "2026-01-14"
        assert positions[1].invested_amount == pytest.approx(2500.0)
        assert positions[1].currency == "USD"

    def test_quoted_fields_with_commas(self) -> None:
        """Commas inside quoted fields do not split columns."""
        csv_text = HEADER + '\nX1,"Fund, Class A",Mgr,Cat,2025-01-01,100,EUR,1,0,10,2026-01-01'

        positions = SheetAdapter.parse_csv(csv_text)

        assert positions[0].name == "Fund, Class A"
        assert positions[0].current_nav == 10.0

    def test_short_rows_dropped(self) -> None:
        """Rows with fewer than ten columns are skipped."""
        csv_text = "\n".join([HEADER, "X1,Too,Short,Row", "", "X2,a,b,c,d,1,EUR,1,0,1"])

        positions = SheetAdapter.parse_csv(csv_text)

        assert [p.isin for p in positions] == ["X2"]
        assert positions[0].last_updated == ""

    def test_blank_currency_defaults_to_eur(self) -> None:
        """A blank currency cell means EUR."""
        positions = SheetAdapter.parse_csv(HEADER + "\nX1,a,b,c,d,1,,1,0,1,")

        assert positions[0].currency == "EUR"

    def test_invalid_rows_skipped(self) -> None:
        """Rows that violate position rules are skipped."""
        csv_text = "\n".join([
            HEADER,
            ",No ISIN,b,c,d,1,EUR,1,0,1,",
            "X1,Negative,b,c,d,-5,EUR,1,0,1,",
            "X2,Fine,b,c,d,5,EUR,1,0,1,",
        ])

        positions = SheetAdapter.parse_csv(csv_text)

        assert [p.isin for p in positions] == ["X2"]

    def test_header_only(self) -> None:
        """A sheet with only a header yields no positions."""
        assert SheetAdapter.parse_csv(HEADER) == []


class TestFetchPositions:
    """Test downloading the sheet."""

    @pytest.mark.asyncio
    async def test_fetch_uses_csv_export_url(self) -> None:
        """The gviz CSV export of the sheet is requested."""
        requested: list[httpx.URL] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(request.url)
            return httpx.Response(200, text=HEADER + "\nX1,a,b,c,d,1,EUR,1,0,1,")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            positions = await SheetAdapter(client=client).fetch_positions("abc123")

        assert [p.isin for p in positions] == ["X1"]
        assert requested[0].path == "/spreadsheets/d/abc123/gviz/tq"
        assert requested[0].params["tqx"] == "out:csv"

    @pytest.mark.asyncio
    async def test_http_error_raises(self) -> None:
        """A failed download raises SheetFetchError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="not found")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(SheetFetchError, match="abc123"):
                await SheetAdapter(client=client).fetch_positions("abc123")
