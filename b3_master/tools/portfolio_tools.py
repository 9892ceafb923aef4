"""Portfolio-domain MCP tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp.server.fastmcp import FastMCP

from b3_master.portfolio.simulator import parse_amount
from b3_master.runtime.response import error_response, success_response
from b3_master.tools.common import run_tool, run_tool_async

if TYPE_CHECKING:
    from b3_master.tools.registry import ToolServices


def register_portfolio_tools(mcp: FastMCP, services: ToolServices) -> None:
    @mcp.tool(description="Return the portfolio valuation: invested, net worth, profit, dividends and allocation.")
    def portfolio_summary() -> str:
        return run_tool(services, "portfolio_summary", lambda: success_response(services.portfolio.summary()))

    @mcp.tool(description="Add a B3 holding. Quantity and average price accept Brazilian formats like '1.234,56'.")
    def add_holding(
        symbol: str,
        quantity: str | float,
        average_price: str | float,
        purchase_date: str | None = None,
    ) -> str:
        def _call() -> str:
            item = services.portfolio.add_holding(
                symbol,
                parse_amount(quantity),
                parse_amount(average_price),
                purchase_date,
            )
            return success_response(item)

        return run_tool(services, "add_holding", _call, symbol=symbol)

    @mcp.tool(description="Remove a holding by its id.")
    def remove_holding(item_id: str) -> str:
        return run_tool(
            services,
            "remove_holding",
            lambda: success_response(services.portfolio.remove_holding(item_id)),
        )

    @mcp.tool(description="Set the uninvested cash balance in BRL.")
    def set_cash_balance(amount: str | float) -> str:
        return run_tool(
            services,
            "set_cash_balance",
            lambda: success_response({"cash_balance": services.portfolio.set_cash_balance(parse_amount(amount))}),
        )

    @mcp.tool(description="Refresh quotes for all tracked assets. Skipped when a refresh is already running.")
    async def refresh_quotes() -> str:
        async def _call() -> str:
            outcome = await services.portfolio.refresh()
            if outcome.error:
                return error_response("DATA_UNAVAILABLE", outcome.error)
            warning = "Refresh already in progress; request ignored." if outcome.skipped else None
            return success_response(outcome, warning=warning)

        return await run_tool_async(services, "refresh_quotes", _call)

    @mcp.tool(description="Return short strategic advice for the current portfolio composition.")
    def portfolio_advice() -> str:
        return run_tool(
            services,
            "portfolio_advice",
            lambda: success_response({"advice": services.portfolio.advice()}),
        )
