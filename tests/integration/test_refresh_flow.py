"""Integration tests for the load, refresh, persist and report flow.

Tests the complete workflow:
1. Load the stored portfolio from JSON
2. Refresh valuations through the orchestrator
3. Persist the outcome once
4. Aggregate and project the refreshed portfolio
"""

from pathlib import Path

import pytest

from fundfolio.adapters.event_log_adapter import InMemoryEventLog
from fundfolio.adapters.json_storage_adapter import JsonFileStorageAdapter
from fundfolio.core.domain.position import Position
from fundfolio.core.ports.event_port import EventLevel
from fundfolio.core.services.portfolio_service import PortfolioService
from fundfolio.core.services.refresh_service import RefreshOrchestrator, RefreshState
from tests.stubs.stub_valuation_adapter import StubValuationAdapter

pytestmark = pytest.mark.integration


@pytest.fixture
def storage(tmp_path: Path) -> JsonFileStorageAdapter:
    """Storage seeded with three unvalued positions."""
    adapter = JsonFileStorageAdapter(tmp_path / "portfolio.json")
    adapter.save(
        [
            Position(isin="IE00B4L5Y983", name="World", category="Equity", invested_amount=1000.0, shares=10.0),
            Position(isin="LU0996179007", name="EM", category="Equity", invested_amount=1000.0, shares=10.0),
            Position(isin="IE00B3XXRP09", name="S&P 500", category="US", currency="USD", invested_amount=1000.0, shares=10.0),
        ],
        "Integration",
    )
    return adapter


@pytest.fixture
def valuations() -> StubValuationAdapter:
    stub = StubValuationAdapter()
    stub.seed_quote(
        "IE00B4L5Y983",
        120.0,
        history=[{"date": "2025-12-31", "nav": 110.0}, {"date": "2026-01-14", "nav": 120.0}],
    )
    stub.seed_quote(
        "LU0996179007",
        90.0,
        history=[{"date": "2026-01-02", "nav": 100.0}, {"date": "2026-01-14", "nav": 90.0}],
    )
    stub.seed_quote("IE00B3XXRP09", 110.0)
    return stub


class TestRefreshFlow:
    """Test refresh against real storage."""

    @pytest.mark.asyncio
    async def test_full_refresh_persists_and_reports(
        self, storage: JsonFileStorageAdapter, valuations: StubValuationAdapter
    ) -> None:
        """A successful batch is saved once and feeds the summary."""
        events = InMemoryEventLog()
        service = PortfolioService(storage, event_sink=events)
        service.load()

        outcome = await RefreshOrchestrator(valuations, event_sink=events).refresh_all(
            service.positions
        )
        service.replace_positions(outcome.positions)

        assert outcome.state is RefreshState.SUCCESS

        reloaded = PortfolioService(storage)
        reloaded.load()
        summary = reloaded.summary()
        assert summary.total_current_value == pytest.approx(1200.0 + 900.0 + 1100.0)
        assert summary.profit == pytest.approx(200.0)
        assert [s.name for s in summary.currency_exposure] == ["EUR", "USD"]

        world = reloaded.get_position("IE00B4L5Y983")
        assert world.last_updated == "2026-01-14"
        # First point of 2026 opens its year
        assert world.history[1].ytd_percent == 0.0
        assert world.history[1].value == pytest.approx(1200.0)

        em = reloaded.get_position("LU0996179007")
        assert em.history[1].ytd_percent == pytest.approx(-10.0)

        assert events.history()[0].level is EventLevel.SUCCESS

    @pytest.mark.asyncio
    async def test_aborted_refresh_keeps_earlier_updates(
        self, storage: JsonFileStorageAdapter, valuations: StubValuationAdapter
    ) -> None:
        """A failure mid-batch persists only the positions refreshed before it."""
        valuations.seed_missing("LU0996179007")
        service = PortfolioService(storage)
        service.load()

        outcome = await RefreshOrchestrator(valuations).refresh_all(service.positions)
        service.replace_positions(outcome.positions)

        stored = storage.load()
        assert outcome.failed_isin == "LU0996179007"
        assert [p.current_nav for p in stored.positions] == [120.0, 0.0, 0.0]
        assert [p.isin for p in stored.positions] == [
            "IE00B4L5Y983",
            "LU0996179007",
            "IE00B3XXRP09",
        ]

    @pytest.mark.asyncio
    async def test_share_edit_after_refresh(
        self, storage: JsonFileStorageAdapter, valuations: StubValuationAdapter
    ) -> None:
        """Editing shares after a refresh rescales the stored history."""
        service = PortfolioService(storage)
        service.load()
        outcome = await RefreshOrchestrator(valuations).refresh_all(service.positions)
        service.replace_positions(outcome.positions)

        world = service.get_position("IE00B4L5Y983")
        service.edit_position(Position.from_dict({**world.to_dict(), "shares": 5.0}))

        stored = storage.load().get_position("IE00B4L5Y983")
        assert stored is not None
        assert [p.value for p in stored.history] == pytest.approx([550.0, 600.0])
