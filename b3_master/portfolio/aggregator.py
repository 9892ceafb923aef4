"""Portfolio valuation and dividend aggregation."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import date

import pandas as pd

from b3_master.portfolio.models import Asset, AssetType, PortfolioItem, PortfolioSummary, UpcomingPayment

LOGGER = logging.getLogger(__name__)

FRAME_COLUMNS = [
    "Symbol",
    "Type",
    "Quantity",
    "Average_Price",
    "Live_Price",
    "Market_Value",
    "Cost_Basis",
    "Yield",
]
ALLOCATION_LABELS = {
    AssetType.STOCK.name: "stocks",
    AssetType.FII.name: "fiis",
}


def latest_asset(item: PortfolioItem, quotes: Mapping[str, Asset]) -> Asset:
    """Freshest known asset for a holding, falling back to its own snapshot."""
    return quotes.get(item.asset.symbol) or item.asset


def parse_payment_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def build_holdings_frame(items: Sequence[PortfolioItem], quotes: Mapping[str, Asset]) -> pd.DataFrame:
    rows = []
    for item in items:
        current = latest_asset(item, quotes)
        market_value = item.quantity * current.price
        rows.append(
            {
                "Symbol": item.asset.symbol,
                "Type": item.asset.type.name,
                "Quantity": float(item.quantity),
                "Average_Price": float(item.average_price),
                "Live_Price": float(current.price),
                "Market_Value": market_value,
                "Cost_Basis": item.quantity * item.average_price,
                "Yield": current.dividend_yield if current.dividend_yield else 0.0,
            }
        )
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def calculate_total_invested(frame: pd.DataFrame) -> float:
    return float(frame["Cost_Basis"].sum()) if not frame.empty else 0.0


def calculate_assets_value(frame: pd.DataFrame) -> float:
    return float(frame["Market_Value"].sum()) if not frame.empty else 0.0


def calculate_estimated_dividends(frame: pd.DataFrame) -> float:
    if frame.empty:
        return 0.0
    return float((frame["Market_Value"] * frame["Yield"]).sum())


def calculate_profit_percentage(profit: float, total_invested: float) -> float:
    if total_invested <= 0:
        return 0.0
    return (profit / total_invested) * 100.0


def calculate_type_allocation(frame: pd.DataFrame, cash_balance: float) -> dict[str, float]:
    totals: dict[str, float] = {"stocks": 0.0, "fiis": 0.0, "other": 0.0}
    if not frame.empty:
        for asset_type, value in frame.groupby("Type", sort=False)["Market_Value"].sum().items():
            totals[ALLOCATION_LABELS.get(asset_type, "other")] += float(value)
    totals["cash"] = float(cash_balance)
    return {bucket: value for bucket, value in totals.items() if value > 0}


def collect_upcoming_payments(
    items: Sequence[PortfolioItem],
    quotes: Mapping[str, Asset],
) -> list[UpcomingPayment]:
    payments: list[UpcomingPayment] = []
    for item in items:
        current = latest_asset(item, quotes)
        per_share = current.last_dividend_value or 0.0
        if not current.next_payment_date or per_share <= 0:
            continue
        pay_date = parse_payment_date(current.next_payment_date)
        if pay_date is None:
            LOGGER.debug(
                "skipping payment with unparseable date: symbol=%s date=%s",
                current.symbol,
                current.next_payment_date,
            )
            continue
        payments.append(
            UpcomingPayment(
                symbol=current.symbol,
                date=pay_date,
                per_share=per_share,
                amount=item.quantity * per_share,
            )
        )
    # sorted() is stable, so same-day payments keep holding order.
    return sorted(payments, key=lambda payment: payment.date)


def summarize_portfolio(
    items: Sequence[PortfolioItem],
    quotes: Mapping[str, Asset],
    cash_balance: float = 0.0,
) -> PortfolioSummary:
    frame = build_holdings_frame(items, quotes)
    total_invested = calculate_total_invested(frame)
    current_assets_value = calculate_assets_value(frame)
    net_worth = current_assets_value + cash_balance
    profit = net_worth - total_invested
    return PortfolioSummary(
        total_invested=total_invested,
        current_assets_value=current_assets_value,
        cash_balance=cash_balance,
        net_worth=net_worth,
        profit=profit,
        profit_percentage=calculate_profit_percentage(profit, total_invested),
        estimated_annual_dividends=calculate_estimated_dividends(frame),
        upcoming_payments=collect_upcoming_payments(items, quotes),
        allocation=calculate_type_allocation(frame, cash_balance),
    )
