"""Quote provider that asks a (search-grounded) LLM for current B3 figures."""

from __future__ import annotations

import json
import re

from b3_master.providers.http import ProviderError
from b3_master.providers.models import QuoteRecord, SourceCitation, TextGenerator
from b3_master.providers.parsing import (
    annualize_dividend_yield,
    format_api_date,
    infer_asset_type,
    normalize_b3_symbol,
    optional_float,
)

_JSON_ARRAY = re.compile(r"\[.*\]", re.DOTALL)


def build_quote_prompt(symbols: list[str]) -> str:
    return (
        "Search current B3 market data for these tickers: "
        f"{', '.join(symbols)}. "
        "Reply ONLY with a JSON array of objects with keys: symbol, price, change (percent), "
        "yield (annual dividend yield as a fraction), lastDividendValue (R$ per share), "
        "nextPaymentDate (YYYY-MM-DD or empty)."
    )


def parse_quote_reply(text: str) -> list[dict]:
    match = _JSON_ARRAY.search(text or "")
    if not match:
        raise ProviderError("llm", "BAD_RESPONSE", "LLM reply did not contain a JSON array.")
    try:
        rows = json.loads(match.group(0))
    except json.JSONDecodeError as error:
        raise ProviderError("llm", "BAD_RESPONSE", "LLM reply contained malformed JSON.") from error
    return [row for row in rows if isinstance(row, dict)] if isinstance(rows, list) else []


class LlmQuoteProvider:
    name = "llm"

    def __init__(self, client: TextGenerator) -> None:
        self.client = client

    def _to_record(self, row: dict) -> QuoteRecord | None:
        price = optional_float(row.get("price"))
        if price is None or price <= 0 or not row.get("symbol"):
            return None
        symbol = normalize_b3_symbol(str(row["symbol"]))
        asset_type = infer_asset_type(symbol)
        last_dividend = optional_float(row.get("lastDividendValue"))
        return QuoteRecord(
            symbol=symbol,
            price=price,
            percent_change=optional_float(row.get("change")) or 0.0,
            name=str(row.get("name") or symbol),
            asset_type=asset_type,
            dividend_yield=annualize_dividend_yield(
                asset_type,
                price,
                vendor_yield=optional_float(row.get("yield")),
                last_dividend=last_dividend,
            ),
            last_dividend_amount=last_dividend,
            next_payment_date=format_api_date(row.get("nextPaymentDate")),
            source="llm",
        )

    def get_quotes(self, symbols: list[str]) -> list[QuoteRecord]:
        if not symbols:
            return []
        reply = self.client.generate_text(build_quote_prompt(symbols))
        if not reply:
            return []
        wanted = {normalize_b3_symbol(symbol) for symbol in symbols}
        records = [self._to_record(row) for row in parse_quote_reply(reply)]
        return [record for record in records if record is not None and record.symbol in wanted]

    def get_quote(self, symbol: str) -> QuoteRecord | None:
        records = self.get_quotes([symbol])
        return records[0] if records else None

    def citations(self) -> list[SourceCitation]:
        cited = list(getattr(self.client, "last_citations", []) or [])
        return cited or [SourceCitation(title="LLM market search", uri="llm://grounded-search")]
