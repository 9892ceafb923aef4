"""Portfolio prompt definitions."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from mcp.server.fastmcp import FastMCP

from b3_master.runtime.response import to_jsonable

if TYPE_CHECKING:
    from b3_master.tools.registry import ToolServices


def _build_portfolio_review_prompt(focus: str, summary: dict[str, object]) -> str:
    topic = focus.strip()
    if not topic:
        raise ValueError("Missing required argument: focus.")
    return (
        "You are a Brazilian equities and real-estate fund (FII) analyst.\n"
        f"Review the portfolio below with a focus on '{topic}' and provide:\n"
        "1) Allocation diagnostics across stocks, FIIs and cash\n"
        "2) Dividend income outlook and upcoming payments\n"
        "3) Concentration or diversification concerns\n"
        "4) A short, prioritized action list.\n"
        "Answer in at most 150 words. This is not financial advice.\n\n"
        f"Portfolio summary (BRL):\n{json.dumps(summary, ensure_ascii=False)}"
    )


def register_portfolio_prompts(mcp: FastMCP, services: "ToolServices") -> None:
    @mcp.prompt(
        name="portfolio_review",
        title="Portfolio Review Prompt",
        description="Generate a review prompt for the current portfolio around a chosen focus.",
    )
    def portfolio_review(focus: str) -> str:
        return _build_portfolio_review_prompt(focus, to_jsonable(services.portfolio.summary()))
