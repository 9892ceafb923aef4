"""Portfolio orchestration service: state updates, refresh, valuation and advice."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable

import numpy as np

from b3_master.portfolio.aggregator import summarize_portfolio
from b3_master.portfolio.models import Asset, PortfolioItem, PortfolioSummary, SimulationParams, SimulationPoint
from b3_master.portfolio.simulator import final_result, simulate_compound_growth
from b3_master.portfolio.store import PortfolioStore, jitter_prices
from b3_master.providers.mock import find_mock_asset
from b3_master.providers.models import SourceCitation
from b3_master.runtime.response import to_jsonable
from b3_master.services.advice_service import AdviceService
from b3_master.services.base import validate_symbol
from b3_master.services.quote_service import QuoteService

LOGGER = logging.getLogger(__name__)


@dataclass
class RefreshOutcome:
    skipped: bool = False
    updated: list[str] = field(default_factory=list)
    dividends_credited: float = 0.0
    sources: list[SourceCitation] = field(default_factory=list)
    error: str | None = None


@dataclass
class SimulationReport:
    params: SimulationParams
    points: list[SimulationPoint]
    final: SimulationPoint
    insight: str


class PortfolioService:
    def __init__(
        self,
        store: PortfolioStore,
        quotes: QuoteService,
        advice: AdviceService,
        today: Callable[[], date] = date.today,
        resource_updated_callback: Callable[[str], None] | None = None,
    ) -> None:
        self.store = store
        self.quotes = quotes
        self.advice_service = advice
        self._today = today
        self._resource_updated_callback = resource_updated_callback

    def _notify(self, uri: str = "portfolio://current") -> None:
        if self._resource_updated_callback is not None:
            self._resource_updated_callback(uri)

    def summary(self) -> PortfolioSummary:
        return summarize_portfolio(self.store.holdings, self.store.market_assets, self.store.cash_balance)

    def resolve_asset(self, symbol: str) -> Asset | None:
        clean = validate_symbol(symbol)
        known = self.store.market_assets.get(clean)
        if known is not None:
            return known
        looked_up = self.quotes.lookup(clean)
        if looked_up.data is not None:
            return looked_up.data.to_asset(find_mock_asset(clean))
        return find_mock_asset(clean)

    def add_holding(
        self,
        symbol: str,
        quantity: float,
        average_price: float,
        purchase_date: str | None = None,
    ) -> PortfolioItem:
        asset = self.resolve_asset(symbol)
        if asset is None:
            raise ValueError(f"Asset not found: {symbol}")
        if purchase_date:
            purchase_date = date.fromisoformat(purchase_date).isoformat()
        item = self.store.add_holding(asset, quantity, average_price, purchase_date)
        LOGGER.info("holding added: id=%s symbol=%s quantity=%s", item.id, asset.symbol, quantity)
        self._notify()
        return item

    def remove_holding(self, item_id: str) -> PortfolioItem:
        try:
            item = self.store.remove_holding(item_id)
        except KeyError:
            raise ValueError(f"Holding not found: {item_id}") from None
        LOGGER.info("holding removed: id=%s symbol=%s", item.id, item.asset.symbol)
        self._notify()
        return item

    def set_cash_balance(self, amount: float) -> float:
        self.store.set_cash_balance(amount)
        self._notify()
        return self.store.cash_balance

    async def refresh(self) -> RefreshOutcome:
        """Fetch fresh quotes for every known symbol; overlapping calls are dropped, not queued."""
        if self.store.is_syncing:
            LOGGER.info("refresh skipped: another refresh is in flight")
            return RefreshOutcome(skipped=True)
        symbols = self.store.symbols()
        if not symbols:
            return RefreshOutcome()

        self.store.is_syncing = True
        try:
            batch = await asyncio.to_thread(self.quotes.fetch_quotes, symbols)
            if batch.is_empty:
                return RefreshOutcome(error="No quote data returned; keeping previous prices.")
            updated = self.store.apply_quotes(batch.data)
            self.store.sources = list(batch.sources)
            self.store.last_sync = datetime.now()
            credited = self.store.credit_dividends(batch.data, self._today())
            LOGGER.info(
                "refresh complete: requested=%s updated=%s dividends_credited=%.2f",
                len(symbols),
                len(updated),
                credited,
            )
            self._notify()
            return RefreshOutcome(updated=updated, dividends_credited=credited, sources=list(batch.sources))
        except Exception as error:
            LOGGER.exception("refresh failed; previous state kept")
            return RefreshOutcome(error=str(error) or error.__class__.__name__)
        finally:
            self.store.is_syncing = False

    def tick_prices(self, rng: np.random.Generator, scale: float = 0.0001) -> bool:
        if self.store.is_syncing:
            return False
        self.store.replace_prices(jitter_prices(self.store.market_assets, rng, scale))
        return True

    async def run_price_ticker(
        self,
        interval_seconds: float,
        stop_event: asyncio.Event,
        rng: np.random.Generator | None = None,
    ) -> None:
        generator = rng or np.random.default_rng()
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
            except asyncio.TimeoutError:
                self.tick_prices(generator)

    def lookup(self, symbol: str) -> Asset | None:
        result = self.quotes.lookup(symbol)
        if result.data is None:
            return None
        return result.data.to_asset(find_mock_asset(result.data.symbol))

    def suggest(self, term: str, limit: int = 5) -> list[Asset]:
        return self.quotes.suggest(term, limit=limit)

    def advice(self) -> str:
        return self.advice_service.portfolio_advice(self.store.holdings, self.store.market_assets)

    def simulate(self, params: SimulationParams) -> SimulationReport:
        points = simulate_compound_growth(params)
        final = final_result(points)
        insight = self.advice_service.simulation_insight(params, final.balance)
        return SimulationReport(params=params, points=points, final=final, insight=insight)

    def snapshot(self) -> dict[str, Any]:
        return {
            "uri": "portfolio://current",
            "holdings": to_jsonable(list(self.store.holdings)),
            "summary": to_jsonable(self.summary()),
            "cash_balance": self.store.cash_balance,
            "last_sync": self.store.last_sync.isoformat() if self.store.last_sync else None,
            "is_syncing": self.store.is_syncing,
        }

    def quotes_snapshot(self) -> dict[str, Any]:
        return {
            "uri": "portfolio://quotes",
            "assets": to_jsonable(list(self.store.market_assets.values())),
            "sources": to_jsonable(self.store.sources),
            "last_sync": self.store.last_sync.isoformat() if self.store.last_sync else None,
        }
