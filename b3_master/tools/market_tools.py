"""Quote lookup and asset search tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp.server.fastmcp import FastMCP

from b3_master.runtime.response import error_response, success_response
from b3_master.tools.common import run_tool

if TYPE_CHECKING:
    from b3_master.tools.registry import ToolServices

GENERIC_LOOKUP_ERROR = "All quote providers are currently unavailable. Please try again later."


def register_market_tools(mcp: FastMCP, services: ToolServices) -> None:
    @mcp.tool(description="Look up the latest quote for a B3 ticker such as PETR4 or HGLG11.")
    def lookup_asset(symbol: str) -> str:
        def _call() -> str:
            asset = services.portfolio.lookup(symbol)
            if asset is None:
                return error_response("DATA_UNAVAILABLE", GENERIC_LOOKUP_ERROR)
            return success_response(asset)

        return run_tool(services, "lookup_asset", _call, symbol=symbol)

    @mcp.tool(description="Suggest catalog assets whose ticker or name matches a search term.")
    def suggest_assets(term: str, limit: int = 5) -> str:
        def _call() -> str:
            if limit < 1:
                raise ValueError("limit must be at least 1.")
            return success_response(services.portfolio.suggest(term, limit=limit))

        return run_tool(services, "suggest_assets", _call)
