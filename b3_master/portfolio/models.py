"""Typed portfolio models."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum


class AssetType(str, Enum):
    STOCK = "Ação"
    FII = "FII"
    CRYPTO = "Cripto"
    FIXED_INCOME = "Renda Fixa"

    @classmethod
    def parse(cls, value: object, default: "AssetType | None" = None) -> "AssetType":
        """Accept either the member name (``FII``) or its display label (``Renda Fixa``)."""
        if isinstance(value, AssetType):
            return value
        text = str(value or "").strip()
        for member in cls:
            if text.upper() == member.name or text.lower() == member.value.lower():
                return member
        if default is not None:
            return default
        raise ValueError(f"Unknown asset type: {value!r}")


@dataclass(frozen=True)
class Asset:
    symbol: str
    name: str
    type: AssetType
    price: float
    change: float = 0.0
    dividend_yield: float | None = None
    last_dividend_value: float | None = None
    next_payment_date: str | None = None

    def with_market_data(
        self,
        price: float,
        change: float,
        dividend_yield: float | None,
        last_dividend_value: float | None,
        next_payment_date: str | None,
    ) -> "Asset":
        return replace(
            self,
            price=price,
            change=change,
            dividend_yield=dividend_yield,
            last_dividend_value=last_dividend_value,
            next_payment_date=next_payment_date,
        )


@dataclass(frozen=True)
class PortfolioItem:
    id: str
    asset: Asset
    quantity: float
    average_price: float
    purchase_date: str


@dataclass(frozen=True)
class UpcomingPayment:
    symbol: str
    date: date
    per_share: float
    amount: float


@dataclass
class PortfolioSummary:
    total_invested: float
    current_assets_value: float
    cash_balance: float
    net_worth: float
    profit: float
    profit_percentage: float
    estimated_annual_dividends: float
    upcoming_payments: list[UpcomingPayment] = field(default_factory=list)
    allocation: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class SimulationParams:
    initial_capital: float
    monthly_contribution: float
    annual_rate: float
    years: int


@dataclass(frozen=True)
class SimulationPoint:
    year: int
    balance: float
    invested: float


@dataclass
class ValidationIssue:
    field: str
    message: str
    row: int | None = None
    code: str = "invalid_value"
