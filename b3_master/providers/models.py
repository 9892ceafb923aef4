"""Normalized quote models shared across providers and services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Protocol

from b3_master.portfolio.models import Asset, AssetType

ProviderName = Literal[
    "mock",
    "yahoo",
    "local_api",
    "brapi",
    "llm",
    "anthropic",
    "gemini",
]


@dataclass
class QuoteRecord:
    symbol: str
    price: float
    percent_change: float = 0.0
    name: str | None = None
    asset_type: AssetType | None = None
    dividend_yield: float | None = None
    last_dividend_amount: float | None = None
    next_payment_date: str | None = None
    source: ProviderName = "mock"

    def to_asset(self, base: Asset | None = None) -> Asset:
        """Overlay market fields on ``base`` (if known) or build a fresh asset."""
        if base is not None:
            return base.with_market_data(
                price=self.price,
                change=self.percent_change,
                dividend_yield=self.dividend_yield,
                last_dividend_value=self.last_dividend_amount,
                next_payment_date=self.next_payment_date,
            )
        return Asset(
            symbol=self.symbol,
            name=self.name or self.symbol,
            type=self.asset_type or AssetType.STOCK,
            price=self.price,
            change=self.percent_change,
            dividend_yield=self.dividend_yield,
            last_dividend_value=self.last_dividend_amount,
            next_payment_date=self.next_payment_date,
        )


@dataclass
class SourceCitation:
    title: str
    uri: str


@dataclass
class QuoteBatch:
    data: list[QuoteRecord] = field(default_factory=list)
    sources: list[SourceCitation] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.data


class QuoteProvider(Protocol):
    """Capability shared by every market-data source."""

    name: ProviderName

    def get_quotes(self, symbols: list[str]) -> list[QuoteRecord]: ...

    def get_quote(self, symbol: str) -> QuoteRecord | None: ...

    def citations(self) -> list[SourceCitation]: ...


class TextGenerator(Protocol):
    """LLM client able to turn a prompt into short text."""

    def generate_text(self, prompt: str) -> str | None: ...
