import pytest

from b3_master.config.settings import Settings
from b3_master.portfolio.intelligence import EMPTY_PORTFOLIO_ADVICE, DIVERSIFY_ADVICE
from b3_master.portfolio.models import Asset, AssetType, PortfolioItem, SimulationParams
from b3_master.providers.anthropic_client import AnthropicClient
from b3_master.providers.gemini_client import GeminiClient
from b3_master.providers.http import ProviderError
from b3_master.services.advice_service import AdviceService, build_llm_client

ITEM = PortfolioItem(
    id="a",
    asset=Asset("PETR4", "Petrobras PN", AssetType.STOCK, 38.0),
    quantity=10,
    average_price=30.0,
    purchase_date="2024-01-01",
)
ITEMS = [ITEM, PortfolioItem("b", Asset("HGLG11", "CSHG", AssetType.FII, 150.0), 2, 150.0, "2024-01-01")]


class _Client:
    def __init__(self, reply: str | None = None, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    def generate_text(self, prompt: str) -> str | None:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


def test_heuristic_mode_never_calls_llm() -> None:
    client = _Client("ignored")
    service = AdviceService("heuristic", client)

    assert service.portfolio_advice(ITEMS, {}) == DIVERSIFY_ADVICE
    assert client.prompts == []


def test_llm_mode_uses_reply() -> None:
    client = _Client("  Add more FIIs for monthly income.  ")
    service = AdviceService("llm", client)

    assert service.portfolio_advice(ITEMS, {}) == "Add more FIIs for monthly income."
    assert "PETR4" in client.prompts[0]


@pytest.mark.parametrize(
    "client",
    [_Client(error=ProviderError("anthropic", "RATE_LIMIT", "slow down", 429)), _Client(reply="   "), _Client(reply=None)],
)
def test_llm_failures_fall_back_to_heuristics(client: _Client) -> None:
    service = AdviceService("llm", client)

    assert service.portfolio_advice(ITEMS, {}) == DIVERSIFY_ADVICE
    insight = service.simulation_insight(SimulationParams(1000.0, 100.0, 10.0, 5), 9000.0)
    assert "5 years" in insight


def test_empty_portfolio_skips_llm() -> None:
    client = _Client("x")

    assert AdviceService("llm", client).portfolio_advice([], {}) == EMPTY_PORTFOLIO_ADVICE
    assert client.prompts == []


def test_llm_mode_without_client_is_heuristic() -> None:
    assert AdviceService("llm", None).uses_llm is False


def test_unknown_mode_rejected() -> None:
    with pytest.raises(ValueError):
        AdviceService("oracle")


def test_build_llm_client_follows_provider_setting() -> None:
    assert build_llm_client(Settings()) is None
    assert isinstance(build_llm_client(Settings(claude_api_key="k")), AnthropicClient)
    gemini = build_llm_client(Settings(llm_provider="gemini", gemini_api_key="g"), grounded=True)
    assert isinstance(gemini, GeminiClient)
    assert gemini.grounded is True
