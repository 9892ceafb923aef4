"""Domain tool registry entrypoint."""

from __future__ import annotations

from dataclasses import dataclass

from mcp.server.fastmcp import FastMCP

from b3_master.portfolio.portfolio_service import PortfolioService
from b3_master.runtime.monitoring import ServerMetrics
from b3_master.tools.market_tools import register_market_tools
from b3_master.tools.portfolio_tools import register_portfolio_tools
from b3_master.tools.simulation_tools import register_simulation_tools


@dataclass
class ToolServices:
    portfolio: PortfolioService
    metrics: ServerMetrics


def build_tool_services(portfolio: PortfolioService, metrics: ServerMetrics | None = None) -> ToolServices:
    return ToolServices(portfolio=portfolio, metrics=metrics or ServerMetrics())


def register_all_tools(mcp: FastMCP, services: ToolServices) -> None:
    register_portfolio_tools(mcp, services)
    register_market_tools(mcp, services)
    register_simulation_tools(mcp, services)
