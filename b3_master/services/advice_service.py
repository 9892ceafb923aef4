"""Advisory text: local heuristics or an LLM, always with a static fallback."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from b3_master.config.settings import Settings
from b3_master.portfolio.intelligence import (
    build_portfolio_advice_prompt,
    build_simulation_prompt,
    generate_portfolio_advice,
    generate_simulation_insight,
)
from b3_master.portfolio.models import Asset, PortfolioItem, SimulationParams
from b3_master.providers.anthropic_client import AnthropicClient
from b3_master.providers.gemini_client import GeminiClient
from b3_master.providers.models import TextGenerator

LOGGER = logging.getLogger(__name__)
ADVICE_MODES = {"heuristic", "llm"}


def build_llm_client(settings: Settings, grounded: bool = False) -> TextGenerator | None:
    if settings.llm_provider == "gemini" and settings.gemini_api_key:
        return GeminiClient(
            settings.gemini_api_key,
            settings.gemini_model,
            settings.request_timeout_seconds,
            grounded=grounded,
        )
    if settings.llm_provider == "anthropic" and settings.claude_api_key:
        return AnthropicClient(settings.claude_api_key, settings.claude_model, settings.request_timeout_seconds)
    return None


class AdviceService:
    def __init__(self, mode: str = "heuristic", llm_client: TextGenerator | None = None) -> None:
        if mode not in ADVICE_MODES:
            raise ValueError(f"Advice mode must be one of {sorted(ADVICE_MODES)}.")
        self.mode = mode
        self.llm_client = llm_client

    @property
    def uses_llm(self) -> bool:
        return self.mode == "llm" and self.llm_client is not None

    def _ask(self, prompt: str, fallback: str, topic: str) -> str:
        if not self.uses_llm:
            return fallback
        try:
            reply = self.llm_client.generate_text(prompt)  # type: ignore[union-attr]
        except Exception as error:
            LOGGER.warning("llm advice failed, using heuristic text: topic=%s error=%s", topic, error)
            return fallback
        return reply.strip() if reply and reply.strip() else fallback

    def portfolio_advice(self, items: Sequence[PortfolioItem], quotes: Mapping[str, Asset]) -> str:
        fallback = generate_portfolio_advice(items, quotes)
        if not items:
            return fallback
        return self._ask(build_portfolio_advice_prompt(items, quotes), fallback, topic="portfolio")

    def simulation_insight(self, params: SimulationParams, final_balance: float) -> str:
        fallback = generate_simulation_insight(final_balance, params.monthly_contribution, int(params.years))
        return self._ask(build_simulation_prompt(params, final_balance), fallback, topic="simulation")
