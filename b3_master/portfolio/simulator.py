"""Compound-growth projection with monthly contributions."""

from __future__ import annotations

import math
import re

from b3_master.portfolio.models import SimulationParams, SimulationPoint

_AMOUNT_NOISE = re.compile(r"(R\$|BRL|%|\s)", re.IGNORECASE)


def parse_amount(value: object) -> float:
    """Best-effort numeric parse of user input; anything unparseable is 0.

    Accepts plain numbers and Brazilian formatted strings such as ``"1.234,56"``,
    ``"R$ 500"`` or ``"12%"``.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        out = float(value)
        return out if math.isfinite(out) else 0.0
    if not isinstance(value, str):
        return 0.0
    cleaned = _AMOUNT_NOISE.sub("", value)
    if not cleaned:
        return 0.0
    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    try:
        out = float(cleaned)
    except ValueError:
        return 0.0
    return out if math.isfinite(out) else 0.0


def monthly_rate_from_annual(annual_rate_percent: float) -> float:
    return (1 + annual_rate_percent / 100.0) ** (1 / 12) - 1


def validate_simulation_params(params: SimulationParams) -> None:
    if params.initial_capital < 0:
        raise ValueError("initial_capital must be zero or positive.")
    if params.monthly_contribution < 0:
        raise ValueError("monthly_contribution must be zero or positive.")
    if params.annual_rate < -100:
        raise ValueError("annual_rate must be -100% or greater.")
    if int(params.years) != params.years or params.years < 1:
        raise ValueError("years must be a whole number of at least 1.")


def simulate_compound_growth(params: SimulationParams) -> list[SimulationPoint]:
    validate_simulation_params(params)
    monthly_rate = monthly_rate_from_annual(params.annual_rate)
    balance = float(params.initial_capital)
    invested = float(params.initial_capital)
    points: list[SimulationPoint] = []
    for month in range(int(params.years) * 12 + 1):
        if month % 12 == 0:
            points.append(
                SimulationPoint(
                    year=month // 12,
                    balance=round(balance, 2),
                    invested=round(invested, 2),
                )
            )
        balance = balance * (1 + monthly_rate) + params.monthly_contribution
        invested += params.monthly_contribution
    return points


def final_result(points: list[SimulationPoint]) -> SimulationPoint:
    if not points:
        raise ValueError("Simulation produced no points.")
    return points[-1]
