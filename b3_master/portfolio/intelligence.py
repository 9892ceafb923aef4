"""Portfolio insight heuristics and advisory prompt building."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence

from b3_master.portfolio.aggregator import latest_asset
from b3_master.portfolio.models import Asset, AssetType, PortfolioItem, SimulationParams

CONCENTRATION_THRESHOLD = 0.7
MIN_DIVERSIFIED_HOLDINGS = 5
HIGH_YIELD_THRESHOLD = 0.10
MILLIONAIRE_THRESHOLD = 1_000_000.0
AGGRESSIVE_CONTRIBUTION = 2_000.0

EMPTY_PORTFOLIO_ADVICE = "Add assets to your portfolio to receive a strategic analysis."
BALANCED_ADVICE = "Your portfolio looks well balanced. Keep contributing consistently and stay focused on the long term."
DIVERSIFY_ADVICE = (
    "Diversification is the only free lunch in the market. "
    "Consider adding more sectors to protect your wealth."
)
CONCENTRATION_ADVICE: dict[AssetType, str] = {
    AssetType.STOCK: (
        "Your portfolio is heavily exposed to stocks. Consider increasing your FII position "
        "to reduce volatility and build monthly passive income."
    ),
    AssetType.FII: (
        "You are almost entirely in FIIs. Great for income, but stocks can offer more "
        "long-term capital growth. Consider rebalancing."
    ),
}
GENERIC_CONCENTRATION_ADVICE = (
    "More than {share:.0f}% of your portfolio is in {label}. Consider rebalancing across asset classes."
)


def composition_by_type(items: Sequence[PortfolioItem], quotes: Mapping[str, Asset]) -> dict[AssetType, float]:
    totals: dict[AssetType, float] = {}
    for item in items:
        value = item.quantity * latest_asset(item, quotes).price
        totals[item.asset.type] = totals.get(item.asset.type, 0.0) + value
    grand_total = sum(totals.values())
    if grand_total <= 0:
        return {}
    return {asset_type: value / grand_total for asset_type, value in totals.items()}


def generate_portfolio_advice(
    items: Sequence[PortfolioItem],
    quotes: Mapping[str, Asset] | None = None,
) -> str:
    quotes = quotes or {}
    if not items:
        return EMPTY_PORTFOLIO_ADVICE

    for asset_type, share in composition_by_type(items, quotes).items():
        if share > CONCENTRATION_THRESHOLD:
            template = CONCENTRATION_ADVICE.get(asset_type)
            if template:
                return template
            return GENERIC_CONCENTRATION_ADVICE.format(share=CONCENTRATION_THRESHOLD * 100, label=asset_type.value)

    if len(items) < MIN_DIVERSIFIED_HOLDINGS:
        return DIVERSIFY_ADVICE

    for item in items:
        current = latest_asset(item, quotes)
        if (current.dividend_yield or 0.0) > HIGH_YIELD_THRESHOLD:
            return (
                f"You hold high-yield assets such as {current.symbol}. "
                "Reinvest those dividends to accelerate the compounding effect."
            )

    return BALANCED_ADVICE


def generate_simulation_insight(final_balance: float, monthly_contribution: float, years: int) -> str:
    if final_balance > MILLIONAIRE_THRESHOLD:
        return f"With this plan you reach millionaire status in {years} years. Discipline is your greatest ally."
    if monthly_contribution > AGGRESSIVE_CONTRIBUTION:
        return (
            f"Monthly contributions of R$ {monthly_contribution:,.2f} are aggressive! "
            "They drastically shorten the road to financial freedom."
        )
    return (
        "The secret is not how much you earn but how much you invest. "
        f"In {years} years your effort will pay off."
    )


def build_portfolio_advice_prompt(items: Sequence[PortfolioItem], quotes: Mapping[str, Asset]) -> str:
    holdings = [
        {
            "symbol": item.asset.symbol,
            "type": item.asset.type.name,
            "quantity": item.quantity,
            "average_price": item.average_price,
            "current_price": latest_asset(item, quotes).price,
            "dividend_yield": latest_asset(item, quotes).dividend_yield,
        }
        for item in items
    ]
    return (
        "You are a Brazilian equity (B3) portfolio advisor. "
        "In at most 3 short sentences, give one practical insight about diversification, "
        "income and risk for these holdings: "
        f"{json.dumps(holdings, ensure_ascii=False)}"
    )


def build_simulation_prompt(params: SimulationParams, final_balance: float) -> str:
    payload = {
        "initial_capital": params.initial_capital,
        "monthly_contribution": params.monthly_contribution,
        "annual_rate_percent": params.annual_rate,
        "years": params.years,
        "projected_balance": final_balance,
    }
    return (
        "You are a personal-finance coach. In one or two motivating sentences, "
        f"comment on this compound-interest projection: {json.dumps(payload)}"
    )
