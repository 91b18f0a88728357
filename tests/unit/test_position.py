"""Unit tests for Position, PortfolioSnapshot and ValuationQuote domain objects."""

from dataclasses import replace
from datetime import date

import pytest

from fundfolio.core.domain.position import HistoryPoint, Position
from fundfolio.core.domain.snapshot import DEFAULT_PORTFOLIO_NAME, PortfolioSnapshot
from fundfolio.core.domain.valuation import ValuationQuote


@pytest.fixture
def sample_position() -> Position:
    """Create a sample Position for testing."""
    return Position(
        isin="IE00B4L5Y983",
        name="iShares Core MSCI World UCITS ETF",
        manager="BlackRock",
        category="Global Equity",
        buy_date="2023-01-15",
        invested_amount=15000.0,
        currency="EUR",
        shares=185.5,
        fees=0.2,
        current_nav=98.45,
        last_updated="2026-01-14",
    )


class TestPositionInvariants:
    """Test Position invariant enforcement."""

    def test_valid_position_creation(self, sample_position: Position) -> None:
        """Valid Position should be created without errors."""
        assert sample_position.isin == "IE00B4L5Y983"
        assert sample_position.history == ()

    def test_empty_isin_raises(self) -> None:
        """Empty ISIN should raise ValueError."""
        with pytest.raises(ValueError, match="ISIN"):
            Position(isin="  ")

    @pytest.mark.parametrize("field_name", ["invested_amount", "shares", "current_nav"])
    def test_negative_amounts_raise(self, field_name: str) -> None:
        """Negative invested amount, shares or NAV should raise ValueError."""
        with pytest.raises(ValueError, match="non-negative"):
            Position(isin="LU0996179007", **{field_name: -1.0})

    @pytest.mark.parametrize("field_name", ["invested_amount", "shares", "current_nav"])
    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_amounts_raise(self, field_name: str, amount: float) -> None:
        """NaN or infinite amounts should raise ValueError."""
        with pytest.raises(ValueError, match="finite"):
            Position(isin="LU0996179007", **{field_name: amount})

    def test_new_position_starts_unvalued(self) -> None:
        """A manually entered position has zero shares and NAV until refreshed."""
        position = Position(isin="LU0996179007", invested_amount=5000.0)
        assert position.current_value == 0.0


class TestPositionValuation:
    """Test derived valuation properties."""

    def test_current_value_is_shares_times_nav(self, sample_position: Position) -> None:
        """current_value should be shares * NAV."""
        assert sample_position.current_value == pytest.approx(185.5 * 98.45)

    def test_current_value_follows_replacement(self, sample_position: Position) -> None:
        """current_value should track shares and NAV after every replacement."""
        updated = replace(sample_position, shares=200.0, current_nav=100.0)
        assert updated.current_value == pytest.approx(20000.0)

    def test_profit_percent(self) -> None:
        """profit_percent should be relative to the invested amount."""
        position = Position(isin="X1", invested_amount=1000.0, shares=10.0, current_nav=150.0)
        assert position.profit == pytest.approx(500.0)
        assert position.profit_percent == pytest.approx(50.0)

    def test_profit_percent_zero_invested(self) -> None:
        """profit_percent should be 0 when nothing was invested."""
        position = Position(isin="X1", shares=10.0, current_nav=150.0)
        assert position.profit_percent == 0.0


class TestPositionSerialization:
    """Test Position to_dict / from_dict."""

    def test_to_dict_uses_snapshot_keys(self, sample_position: Position) -> None:
        """to_dict should use the snapshot's camelCase keys."""
        result = sample_position.to_dict()

        assert result["isin"] == "IE00B4L5Y983"
        assert result["investedAmount"] == 15000.0
        assert result["currentNAV"] == 98.45
        assert result["buyDate"] == "2023-01-15"
        assert result["history"] == []

    def test_from_dict_defaults(self) -> None:
        """Missing optional fields fall back to defaults."""
        position = Position.from_dict({"isin": "LU0996179007", "name": "Amundi EM"})

        assert position.currency == "EUR"
        assert position.shares == 0.0
        assert position.history == ()

    def test_from_dict_reads_history(self) -> None:
        """History entries are read; entries without a usable date are skipped."""
        position = Position.from_dict({
            "isin": "LU0996179007",
            "shares": 2,
            "history": [
                {"date": "2025-01-31", "nav": 10.0, "value": 20.0, "ytdPercent": 0.0},
                {"date": "not a date", "nav": 11.0},
                {"date": "2025-02-28", "nav": "11.5"},
            ],
        })

        assert position.history == (
            HistoryPoint(date=date(2025, 1, 31), nav=10.0, value=20.0, ytd_percent=0.0),
            HistoryPoint(date=date(2025, 2, 28), nav=11.5, value=0.0, ytd_percent=0.0),
        )

    def test_from_dict_non_object_raises(self) -> None:
        """Non-dict entries should raise ValueError."""
        with pytest.raises(ValueError, match="object"):
            Position.from_dict(["IE00B4L5Y983"])  # type: ignore[arg-type]

    def test_from_dict_non_finite_raises(self) -> None:
        """Stored NaN or Infinity amounts are rejected."""
        with pytest.raises(ValueError, match="finite"):
            Position.from_dict({"isin": "X1", "shares": "NaN"})
        with pytest.raises(ValueError, match="finite"):
            Position.from_dict({"isin": "X1", "currentNAV": "Infinity"})

    def test_from_dict_non_finite_history_reads_zero(self) -> None:
        """Non-finite history figures are read as 0."""
        position = Position.from_dict({
            "isin": "X1",
            "history": [{"date": "2025-01-31", "nav": "NaN", "value": "Infinity"}],
        })

        assert position.history[0].nav == 0.0
        assert position.history[0].value == 0.0

    def test_raw_history(self) -> None:
        """raw_history should return the (date, nav) pairs."""
        position = Position(
            isin="X1",
            history=(HistoryPoint(date(2025, 1, 31), 10.0, 20.0, 0.0),),
        )
        assert position.raw_history() == [{"date": "2025-01-31", "nav": 10.0}]


class TestPortfolioSnapshot:
    """Test PortfolioSnapshot invariants and serialization."""

    def test_duplicate_isins_raise(self) -> None:
        """ISINs must be unique within a snapshot."""
        with pytest.raises(ValueError, match="unique"):
            PortfolioSnapshot(positions=(Position(isin="X1"), Position(isin="X1")))

    def test_invalid_version_raises(self) -> None:
        """Version must be positive."""
        with pytest.raises(ValueError, match="version"):
            PortfolioSnapshot(version=0)

    def test_round_trip_keys(self, sample_position: Position) -> None:
        """to_dict should produce the persisted schema."""
        snapshot = PortfolioSnapshot(
            portfolio_name="Main",
            positions=(sample_position,),
            last_modified="2026-01-14T10:00:00+00:00",
        )
        data = snapshot.to_dict()

        assert set(data) == {"version", "portfolioName", "lastModified", "funds"}
        assert PortfolioSnapshot.from_dict(data) == snapshot

    def test_from_dict_requires_funds_list(self) -> None:
        """from_dict should reject a missing or non-list funds entry."""
        with pytest.raises(ValueError, match="funds"):
            PortfolioSnapshot.from_dict({"portfolioName": "x", "funds": {}})

    def test_defaults(self) -> None:
        """Empty snapshot uses the default name and is empty."""
        snapshot = PortfolioSnapshot()

        assert snapshot.portfolio_name == DEFAULT_PORTFOLIO_NAME
        assert snapshot.is_empty
        assert snapshot.get_position("X1") is None


class TestValuationQuote:
    """Test ValuationQuote payload parsing."""

    def test_from_payload(self) -> None:
        """A well-formed payload should produce a quote."""
        quote = ValuationQuote.from_payload({
            "current": {"nav": "101.5", "date": "2026-01-14"},
            "history": [{"date": "2025-12-31", "nav": 100.0}, "junk"],
        })

        assert quote.nav == 101.5
        assert quote.date == "2026-01-14"
        assert quote.history == ({"date": "2025-12-31", "nav": 100.0},)

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            {},
            {"current": {"date": "2026-01-14"}},
            {"current": {"nav": "n/a"}},
            {"current": {"nav": 1.0}, "history": "none"},
        ],
    )
    def test_malformed_payload_raises(self, payload: object) -> None:
        """Malformed payloads should raise ValueError."""
        with pytest.raises(ValueError):
            ValuationQuote.from_payload(payload)

    def test_negative_nav_raises(self) -> None:
        """Negative NAV should raise ValueError."""
        with pytest.raises(ValueError, match="non-negative"):
            ValuationQuote(nav=-1.0, date="2026-01-14")

    @pytest.mark.parametrize("nav", ["nan", "Infinity", "-inf"])
    def test_non_finite_nav_raises(self, nav: str) -> None:
        """A NaN or infinite NAV is not a usable quote."""
        with pytest.raises(ValueError, match="finite"):
            ValuationQuote.from_payload({"current": {"nav": nav, "date": "2026-01-14"}})
