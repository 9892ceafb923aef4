"""brapi.dev adapter with normalized outputs."""

from __future__ import annotations

from b3_master.providers.http import ProviderError, fetch_json
from b3_master.providers.models import QuoteRecord, SourceCitation
from b3_master.providers.parsing import (
    annualize_dividend_yield,
    format_api_date,
    infer_asset_type,
    normalize_b3_symbol,
    optional_float,
)

BRAPI_BASE_URL = "https://brapi.dev/api"


def _latest_cash_dividend(row: dict) -> dict | None:
    dividends = (row.get("dividendsData") or {}).get("cashDividends") or []
    candidates = [item for item in dividends if isinstance(item, dict) and optional_float(item.get("rate"))]
    if not candidates:
        return None
    return max(candidates, key=lambda item: format_api_date(item.get("paymentDate")) or "")


class BrapiClient:
    name = "brapi"

    def __init__(self, token: str | None = None, timeout_seconds: float = 15.0) -> None:
        self.token = token
        self.timeout_seconds = timeout_seconds

    def _request(self, tickers: list[str]) -> dict:
        params = {"dividends": "true"}
        if self.token:
            params["token"] = self.token
        path = ",".join(normalize_b3_symbol(ticker) for ticker in tickers)
        data = fetch_json(
            f"{BRAPI_BASE_URL}/quote/{path}",
            provider="brapi",
            timeout_seconds=self.timeout_seconds,
            params=params,
        )
        if isinstance(data, dict) and data.get("error"):
            message = str(data.get("message") or "brapi upstream error.")
            lower = message.lower()
            if "limit" in lower:
                raise ProviderError("brapi", "RATE_LIMIT", message)
            if "token" in lower:
                raise ProviderError("brapi", "AUTH", message)
            if "não encontrado" in lower or "not found" in lower:
                raise ProviderError("brapi", "NOT_FOUND", message)
            raise ProviderError("brapi", "UPSTREAM", message)
        return data if isinstance(data, dict) else {}

    def _to_record(self, row: dict) -> QuoteRecord | None:
        price = optional_float(row.get("regularMarketPrice"))
        raw_symbol = row.get("symbol")
        if price is None or not isinstance(raw_symbol, str):
            return None
        symbol = normalize_b3_symbol(raw_symbol)
        asset_type = infer_asset_type(symbol)
        dividend = _latest_cash_dividend(row)
        last_amount = optional_float(dividend.get("rate")) if dividend else None
        return QuoteRecord(
            symbol=symbol,
            price=price,
            percent_change=optional_float(row.get("regularMarketChangePercent")) or 0.0,
            name=row.get("longName") or row.get("shortName") or symbol,
            asset_type=asset_type,
            dividend_yield=annualize_dividend_yield(
                asset_type,
                price,
                vendor_yield=optional_float(row.get("dividendYield")),
                last_dividend=last_amount,
                vendor_yield_is_percent=True,
            ),
            last_dividend_amount=last_amount,
            next_payment_date=format_api_date(dividend.get("paymentDate")) if dividend else None,
            source="brapi",
        )

    def get_quotes(self, symbols: list[str]) -> list[QuoteRecord]:
        if not symbols:
            return []
        data = self._request(symbols)
        records = []
        for row in data.get("results") or []:
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
        return [SourceCitation(title="brapi.dev", uri="https://brapi.dev")]
