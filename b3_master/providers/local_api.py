"""Adapter for a user-run B3 quote API exposing ``GET {base}/{SYMBOL}``."""

from __future__ import annotations

import logging

from b3_master.providers.http import ProviderError, fetch_json
from b3_master.providers.models import QuoteRecord, SourceCitation
from b3_master.providers.parsing import (
    annualize_dividend_yield,
    format_api_date,
    infer_asset_type,
    normalize_b3_symbol,
    optional_float,
    parse_api_value,
)

LOGGER = logging.getLogger(__name__)


def map_local_payload(payload: dict) -> QuoteRecord | None:
    """Map ``{symbol, price, change, dividends: {last | history[]}}`` to a quote record.

    Payloads without a positive price map to None.
    """
    symbol = normalize_b3_symbol(str(payload.get("symbol") or "N/A"))
    dividends = payload.get("dividends") or {}
    last = dividends.get("last") if isinstance(dividends, dict) else None
    if not last and isinstance(dividends, dict):
        history = dividends.get("history") or []
        last = history[0] if history else None
    last = last if isinstance(last, dict) else {}

    price = optional_float(payload.get("price"))
    if price is None or price <= 0:
        return None
    asset_type = infer_asset_type(symbol)
    amount = parse_api_value(last.get("amount"))
    return QuoteRecord(
        symbol=symbol,
        price=price,
        percent_change=parse_api_value(payload.get("change")),
        name=str(payload.get("name") or symbol),
        asset_type=asset_type,
        dividend_yield=annualize_dividend_yield(asset_type, price, last_dividend=amount),
        last_dividend_amount=amount or None,
        next_payment_date=format_api_date(last.get("payDate")),
        source="local_api",
    )


class LocalApiClient:
    name = "local_api"

    def __init__(self, base_url: str, timeout_seconds: float = 15.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def get_quote(self, symbol: str) -> QuoteRecord | None:
        clean = normalize_b3_symbol(symbol)
        data = fetch_json(
            f"{self.base_url}/{clean}",
            provider="local_api",
            timeout_seconds=self.timeout_seconds,
            max_retries=1,
        )
        if not isinstance(data, dict) or not data:
            return None
        return map_local_payload(data)

    def get_quotes(self, symbols: list[str]) -> list[QuoteRecord]:
        records: list[QuoteRecord] = []
        failures: list[ProviderError] = []
        for symbol in symbols:
            try:
                record = self.get_quote(symbol)
            except ProviderError as error:
                LOGGER.warning(
                    "local api quote failed: symbol=%s code=%s base_url=%s",
                    symbol,
                    error.code,
                    self.base_url,
                )
                failures.append(error)
                continue
            if record is not None:
                records.append(record)
        if not records and failures:
            raise failures[-1]
        return records

    def citations(self) -> list[SourceCitation]:
        return [SourceCitation(title="Local B3 API", uri=self.base_url)]
