"""Yahoo Finance adapter for B3 tickers (``.SA`` suffix)."""

from __future__ import annotations

import logging

import yfinance as yf

from b3_master.providers.http import fetch_json
from b3_master.providers.models import QuoteRecord, SourceCitation
from b3_master.providers.parsing import (
    annualize_dividend_yield,
    format_api_date,
    infer_asset_type,
    normalize_b3_symbol,
    optional_float,
)

LOGGER = logging.getLogger(__name__)
YAHOO_QUOTE_URL = "https://query1.finance.yahoo.com/v7/finance/quote"


def to_yahoo_symbol(symbol: str) -> str:
    clean = normalize_b3_symbol(symbol)
    return clean if clean.endswith(".SA") else f"{clean}.SA"


class YahooFinanceClient:
    name = "yahoo"

    def __init__(self, timeout_seconds: float = 15.0) -> None:
        self.timeout_seconds = timeout_seconds

    def _last_dividend(self, symbol: str) -> float | None:
        """Most recent per-share dividend from yfinance's dividend history."""
        try:
            dividends = yf.Ticker(to_yahoo_symbol(symbol)).dividends
        except Exception as error:
            LOGGER.warning("yahoo dividend history failed: symbol=%s error=%s", symbol, error)
            return None
        if dividends is None or dividends.empty:
            return None
        amount = float(dividends.iloc[-1])
        return amount if amount > 0 else None

    def _to_record(self, item: dict) -> QuoteRecord | None:
        price = optional_float(item.get("regularMarketPrice"))
        raw_symbol = item.get("symbol")
        if price is None or not isinstance(raw_symbol, str):
            return None
        symbol = normalize_b3_symbol(raw_symbol)
        asset_type = infer_asset_type(symbol)
        last_dividend = self._last_dividend(symbol)
        payment_date = format_api_date(item.get("dividendDate"))
        return QuoteRecord(
            symbol=symbol,
            price=price,
            percent_change=optional_float(item.get("regularMarketChangePercent")) or 0.0,
            name=item.get("longName") or item.get("shortName") or symbol,
            asset_type=asset_type,
            dividend_yield=annualize_dividend_yield(
                asset_type,
                price,
                vendor_yield=optional_float(item.get("trailingAnnualDividendYield")),
                last_dividend=last_dividend,
            ),
            last_dividend_amount=last_dividend,
            next_payment_date=payment_date,
            source="yahoo",
        )

    def get_quotes(self, symbols: list[str]) -> list[QuoteRecord]:
        if not symbols:
            return []
        joined = ",".join(to_yahoo_symbol(symbol) for symbol in symbols)
        data = fetch_json(
            YAHOO_QUOTE_URL,
            provider="yahoo",
            timeout_seconds=self.timeout_seconds,
            params={"symbols": joined},
        )
        rows = ((data or {}).get("quoteResponse") or {}).get("result") or []
        records = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            record = self._to_record(row)
            if record is not None:
                records.append(record)
        return records

    def get_quote(self, symbol: str) -> QuoteRecord | None:
        records = self.get_quotes([symbol])
        return records[0] if records else None

    def citations(self) -> list[SourceCitation]:
        return [SourceCitation(title="B3 / Yahoo Finance", uri="https://finance.yahoo.com")]
