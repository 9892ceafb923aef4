"""Single owner of mutable portfolio state."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import date, datetime
from typing import Callable

import numpy as np

from b3_master.portfolio.models import Asset, PortfolioItem
from b3_master.providers.models import QuoteRecord, SourceCitation


def _new_item_id() -> str:
    return uuid.uuid4().hex[:9]


def jitter_prices(
    assets: Mapping[str, Asset],
    rng: np.random.Generator,
    scale: float = 0.0001,
) -> dict[str, Asset]:
    """Nudge every price by uniform noise in ``[-scale/2, scale/2)`` of itself, floored at 0.01."""
    if not assets:
        return {}
    symbols = list(assets)
    prices = np.array([assets[symbol].price for symbol in symbols], dtype=float)
    noise = (rng.random(len(prices)) - 0.5) * (prices * scale)
    nudged = np.maximum(0.01, prices + noise)
    return {symbol: replace(assets[symbol], price=float(price)) for symbol, price in zip(symbols, nudged)}


class PortfolioStore:
    """Holdings, known market assets and cash; every mutation goes through a method here."""

    def __init__(
        self,
        market_assets: Iterable[Asset] = (),
        holdings: Iterable[PortfolioItem] = (),
        cash_balance: float = 0.0,
        id_factory: Callable[[], str] = _new_item_id,
    ) -> None:
        self._market_assets: dict[str, Asset] = {asset.symbol: asset for asset in market_assets}
        self._holdings: list[PortfolioItem] = list(holdings)
        self._cash_balance = float(cash_balance)
        self._id_factory = id_factory
        self._credited: set[tuple[str, str]] = set()
        self.sources: list[SourceCitation] = []
        self.last_sync: datetime | None = None
        self.is_syncing = False

    @property
    def holdings(self) -> tuple[PortfolioItem, ...]:
        return tuple(self._holdings)

    @property
    def market_assets(self) -> dict[str, Asset]:
        return dict(self._market_assets)

    @property
    def cash_balance(self) -> float:
        return self._cash_balance

    def symbols(self) -> list[str]:
        ordered: dict[str, None] = {}
        for symbol in self._market_assets:
            ordered.setdefault(symbol, None)
        for item in self._holdings:
            ordered.setdefault(item.asset.symbol, None)
        return list(ordered)

    def add_holding(
        self,
        asset: Asset,
        quantity: float,
        average_price: float,
        purchase_date: str | None = None,
    ) -> PortfolioItem:
        if quantity <= 0:
            raise ValueError("quantity must be positive.")
        if average_price < 0:
            raise ValueError("average_price must be zero or positive.")
        item = PortfolioItem(
            id=self._id_factory(),
            asset=asset,
            quantity=float(quantity),
            average_price=float(average_price),
            purchase_date=purchase_date or date.today().isoformat(),
        )
        self._holdings.append(item)
        return item

    def remove_holding(self, item_id: str) -> PortfolioItem:
        for index, item in enumerate(self._holdings):
            if item.id == item_id:
                return self._holdings.pop(index)
        raise KeyError(item_id)

    def set_cash_balance(self, amount: float) -> None:
        if amount < 0:
            raise ValueError("cash balance must be zero or positive.")
        self._cash_balance = float(amount)

    def apply_quotes(self, records: Iterable[QuoteRecord]) -> list[str]:
        """Overwrite market fields for known or held symbols; returns the symbols updated."""
        updated: list[str] = []
        for record in records:
            held = [item for item in self._holdings if item.asset.symbol == record.symbol]
            known = self._market_assets.get(record.symbol)
            if known is None and not held:
                continue
            base = known or held[0].asset
            self._market_assets[record.symbol] = record.to_asset(base)
            if held:
                self._holdings = [
                    replace(item, asset=record.to_asset(item.asset)) if item.asset.symbol == record.symbol else item
                    for item in self._holdings
                ]
            updated.append(record.symbol)
        return updated

    def credit_dividends(self, records: Iterable[QuoteRecord], today: date) -> float:
        """Add same-day dividend payments to cash, at most once per holding and payment date."""
        today_iso = today.isoformat()
        self._credited = {key for key in self._credited if key[1] >= today_iso}
        by_symbol = {record.symbol: record for record in records}
        total = 0.0
        for item in self._holdings:
            record = by_symbol.get(item.asset.symbol)
            if record is None or record.next_payment_date != today_iso:
                continue
            if not record.last_dividend_amount or record.last_dividend_amount <= 0:
                continue
            key = (item.id, today_iso)
            if key in self._credited:
                continue
            self._credited.add(key)
            total += item.quantity * record.last_dividend_amount
        self._cash_balance += total
        return total

    def replace_prices(self, assets: Mapping[str, Asset]) -> None:
        for symbol, asset in assets.items():
            if symbol in self._market_assets:
                self._market_assets[symbol] = asset
