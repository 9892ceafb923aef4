"""Portfolio resource definitions."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from mcp.server.fastmcp import FastMCP

if TYPE_CHECKING:
    from b3_master.tools.registry import ToolServices

CURRENT_PORTFOLIO_URI = "portfolio://current"
QUOTES_URI = "portfolio://quotes"


def register_portfolio_resources(mcp: FastMCP, services: "ToolServices") -> None:
    @mcp.resource(
        CURRENT_PORTFOLIO_URI,
        name="current-portfolio",
        title="Current Portfolio Snapshot",
        description="Holdings, cash and valuation summary as of the last change or refresh.",
        mime_type="application/json",
    )
    def current_portfolio_resource() -> str:
        return json.dumps(services.portfolio.snapshot(), ensure_ascii=True)

    @mcp.resource(
        QUOTES_URI,
        name="market-quotes",
        title="Tracked Asset Quotes",
        description="Latest known quote for every tracked asset plus the sources of the last refresh.",
        mime_type="application/json",
    )
    def quotes_resource() -> str:
        return json.dumps(services.portfolio.quotes_snapshot(), ensure_ascii=True)
