"""Compound-growth simulation tool."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp.server.fastmcp import FastMCP

from b3_master.portfolio.models import SimulationParams
from b3_master.portfolio.simulator import parse_amount
from b3_master.runtime.response import success_response
from b3_master.tools.common import run_tool

if TYPE_CHECKING:
    from b3_master.tools.registry import ToolServices


def register_simulation_tools(mcp: FastMCP, services: ToolServices) -> None:
    @mcp.tool(
        description=(
            "Project compound growth with monthly contributions. annual_rate is a percentage "
            "(12 means 12% a year); amounts accept '1.234,56' or 'R$ 500'."
        )
    )
    def simulate_growth(
        initial_capital: str | float,
        monthly_contribution: str | float,
        annual_rate: str | float,
        years: str | int,
    ) -> str:
        def _call() -> str:
            params = SimulationParams(
                initial_capital=parse_amount(initial_capital),
                monthly_contribution=parse_amount(monthly_contribution),
                annual_rate=parse_amount(annual_rate),
                years=parse_amount(years),
            )
            report = services.portfolio.simulate(params)
            return success_response(
                {
                    "params": report.params,
                    "points": report.points,
                    "final_balance": report.final.balance,
                    "total_invested": report.final.invested,
                    "insight": report.insight,
                }
            )

        return run_tool(services, "simulate_growth", _call)
