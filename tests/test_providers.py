import pandas as pd
import pytest

from b3_master.portfolio.models import Asset, AssetType
from b3_master.portfolio.store import PortfolioStore
from b3_master.providers import brapi as brapi_module
from b3_master.providers import gemini_client as gemini_module
from b3_master.providers import local_api as local_api_module
from b3_master.providers import yahoo_finance as yahoo_module
from b3_master.providers.anthropic_client import AnthropicClient
from b3_master.providers.brapi import BrapiClient
from b3_master.providers.gemini_client import GeminiClient
from b3_master.providers.http import ProviderError, map_status_to_code
from b3_master.providers.llm_quotes import LlmQuoteProvider, parse_quote_reply
from b3_master.providers.local_api import LocalApiClient, map_local_payload
from b3_master.providers.mock import MockQuoteProvider, find_mock_asset, search_catalog
from b3_master.providers.yahoo_finance import YahooFinanceClient, to_yahoo_symbol


class _FakeTextClient:
    def __init__(self, reply: str | None) -> None:
        self.reply = reply
        self.prompts: list[str] = []
        self.last_citations = []

    def generate_text(self, prompt: str) -> str | None:
        self.prompts.append(prompt)
        return self.reply


def test_status_code_mapping() -> None:
    assert map_status_to_code(401) == "AUTH"
    assert map_status_to_code(404) == "NOT_FOUND"
    assert map_status_to_code(429) == "RATE_LIMIT"
    assert map_status_to_code(502) == "UPSTREAM"


def test_mock_provider_serves_catalog_and_skips_unknown() -> None:
    provider = MockQuoteProvider()

    records = provider.get_quotes(["PETR4", "ZZZZ9", "hglg11.sa"])

    assert [record.symbol for record in records] == ["PETR4", "HGLG11"]
    assert records[1].asset_type == AssetType.FII
    assert provider.get_quote("ZZZZ9") is None


def test_catalog_search_matches_symbol_and_name() -> None:
    assert [asset.symbol for asset in search_catalog("petr")] == ["PETR4"]
    assert "HGLG11" in [asset.symbol for asset in search_catalog("logística")]
    assert search_catalog("   ") == []
    assert len(search_catalog("11", limit=2)) == 2
    assert find_mock_asset("vale3").name == "Vale ON"


def test_brapi_maps_quote_and_latest_dividend(monkeypatch) -> None:
    captured = {}

    def fake_fetch_json(url, provider, timeout_seconds=15.0, headers=None, params=None, max_retries=3):
        captured["url"] = url
        captured["params"] = params
        return {
            "results": [
                {
                    "symbol": "HGLG11",
                    "longName": "CSHG Logistica",
                    "regularMarketPrice": 160.0,
                    "regularMarketChangePercent": 0.5,
                    "dividendsData": {
                        "cashDividends": [
                            {"rate": 1.1, "paymentDate": "2025-10-14T00:00:00.000Z"},
                            {"rate": 1.2, "paymentDate": "2025-11-14T00:00:00.000Z"},
                        ]
                    },
                }
            ]
        }

    monkeypatch.setattr(brapi_module, "fetch_json", fake_fetch_json)

    records = BrapiClient(token="abc").get_quotes(["HGLG11"])

    assert captured["url"].endswith("/quote/HGLG11")
    assert captured["params"] == {"dividends": "true", "token": "abc"}
    record = records[0]
    assert record.price == 160.0
    assert record.last_dividend_amount == 1.2
    assert record.next_payment_date == "2025-11-14"
    assert record.dividend_yield == pytest.approx(1.2 * 12 / 160.0)
    assert record.source == "brapi"


def test_brapi_percent_yield_becomes_fraction(monkeypatch) -> None:
    monkeypatch.setattr(
        brapi_module,
        "fetch_json",
        lambda *args, **kwargs: {"results": [{"symbol": "PETR4", "regularMarketPrice": 38.0, "dividendYield": 14.2}]},
    )

    record = BrapiClient().get_quote("PETR4")

    assert record.dividend_yield == pytest.approx(0.142)
    assert record.next_payment_date is None


def test_brapi_error_body_maps_to_rate_limit(monkeypatch) -> None:
    monkeypatch.setattr(
        brapi_module,
        "fetch_json",
        lambda *args, **kwargs: {"error": True, "message": "Você atingiu o limite de requisições"},
    )

    with pytest.raises(ProviderError) as error:
        BrapiClient().get_quotes(["PETR4"])

    assert error.value.code == "RATE_LIMIT"


def test_yahoo_maps_quote_with_dividend_history(monkeypatch) -> None:
    captured = {}

    def fake_fetch_json(url, provider, timeout_seconds=15.0, headers=None, params=None, max_retries=3):
        captured["params"] = params
        return {
            "quoteResponse": {
                "result": [
                    {
                        "symbol": "MXRF11.SA",
                        "shortName": "MAXI RENDA",
                        "regularMarketPrice": 10.0,
                        "dividendDate": 1763078400,
                    },
                    {"symbol": "BROKEN.SA"},
                ]
            }
        }

    monkeypatch.setattr(yahoo_module, "fetch_json", fake_fetch_json)
    monkeypatch.setattr(YahooFinanceClient, "_last_dividend", lambda self, symbol: 0.1)

    records = YahooFinanceClient().get_quotes(["MXRF11"])

    assert captured["params"] == {"symbols": "MXRF11.SA"}
    assert len(records) == 1
    assert records[0].symbol == "MXRF11"
    assert records[0].dividend_yield == pytest.approx(0.12)
    assert records[0].next_payment_date == "2025-11-14"


def test_yahoo_without_dividend_date_leaves_payment_date_empty(monkeypatch) -> None:
    history = pd.Series([0.5], index=pd.to_datetime(["2019-03-01"]))

    class _Ticker:
        def __init__(self, symbol: str) -> None:
            self.dividends = history

    def fake_fetch_json(url, provider, timeout_seconds=15.0, headers=None, params=None, max_retries=3):
        return {"quoteResponse": {"result": [{"symbol": "PETR4.SA", "regularMarketPrice": 38.0}]}}

    monkeypatch.setattr(yahoo_module, "fetch_json", fake_fetch_json)
    monkeypatch.setattr(yahoo_module.yf, "Ticker", _Ticker)

    record = YahooFinanceClient().get_quote("PETR4")

    assert record is not None
    assert record.last_dividend_amount == 0.5
    assert record.next_payment_date is None


def test_yahoo_dividend_history_reads_last_entry(monkeypatch) -> None:
    history = pd.Series([0.09, 0.1], index=pd.to_datetime(["2025-10-14", "2025-11-14"]))

    class _Ticker:
        def __init__(self, symbol: str) -> None:
            assert symbol == "MXRF11.SA"
            self.dividends = history

    monkeypatch.setattr(yahoo_module.yf, "Ticker", _Ticker)

    assert YahooFinanceClient()._last_dividend("MXRF11") == 0.1


def test_to_yahoo_symbol() -> None:
    assert to_yahoo_symbol("petr4") == "PETR4.SA"
    assert to_yahoo_symbol("PETR4.SA") == "PETR4.SA"


def test_local_payload_prefers_last_dividend() -> None:
    record = map_local_payload(
        {
            "symbol": "knri11",
            "price": "140,50",
            "change": "-0,3%",
            "dividends": {"last": {"amount": "1,00", "payDate": "14/11/2025"}},
        }
    )

    assert record.symbol == "KNRI11"
    assert record.price == pytest.approx(140.5)
    assert record.percent_change == pytest.approx(-0.3)
    assert record.last_dividend_amount == pytest.approx(1.0)
    assert record.next_payment_date == "2025-11-14"


def test_local_payload_falls_back_to_history() -> None:
    record = map_local_payload(
        {"symbol": "PETR4", "price": 38, "dividends": {"history": [{"amount": 1.12, "payDate": "2025-12-19"}]}}
    )

    assert record.last_dividend_amount == pytest.approx(1.12)
    assert record.dividend_yield == pytest.approx(1.12 * 4 / 38)


def test_local_payload_without_dividends() -> None:
    record = map_local_payload({"symbol": "WEGE3", "price": 44.7})

    assert record.last_dividend_amount is None
    assert record.dividend_yield is None
    assert record.next_payment_date is None


@pytest.mark.parametrize("price", [None, "", "n/a", 0, "-1,00"])
def test_local_payload_without_usable_price_is_dropped(price: object) -> None:
    assert map_local_payload({"symbol": "PETR4", "price": price}) is None


def test_local_api_missing_price_keeps_previous_valuation(monkeypatch) -> None:
    def fake_fetch_json(url, provider, timeout_seconds=15.0, headers=None, params=None, max_retries=3):
        return {"symbol": "PETR4", "price": None}

    monkeypatch.setattr(local_api_module, "fetch_json", fake_fetch_json)
    store = PortfolioStore(market_assets=[Asset("PETR4", "Petrobras PN", AssetType.STOCK, 38.0)])
    store.add_holding(store.market_assets["PETR4"], 100, 30.0)

    records = LocalApiClient("http://localhost:3000").get_quotes(["PETR4"])
    store.apply_quotes(records)

    assert records == []
    assert store.holdings[0].asset.price == 38.0


def test_local_api_skips_failed_symbols(monkeypatch) -> None:
    def fake_fetch_json(url, provider, timeout_seconds=15.0, headers=None, params=None, max_retries=3):
        if url.endswith("/BAD4"):
            raise ProviderError("local_api", "NOT_FOUND", "missing", 404)
        return {"symbol": url.rsplit("/", 1)[-1], "price": 10}

    monkeypatch.setattr(local_api_module, "fetch_json", fake_fetch_json)
    client = LocalApiClient("http://localhost:3000/api/")

    records = client.get_quotes(["PETR4", "BAD4"])

    assert [record.symbol for record in records] == ["PETR4"]


def test_local_api_raises_when_everything_fails(monkeypatch) -> None:
    def fake_fetch_json(*args, **kwargs):
        raise ProviderError("local_api", "NETWORK", "down")

    monkeypatch.setattr(local_api_module, "fetch_json", fake_fetch_json)

    with pytest.raises(ProviderError):
        LocalApiClient("http://localhost:3000").get_quotes(["PETR4"])


def test_llm_reply_parsing() -> None:
    rows = parse_quote_reply('Here you go:\n[{"symbol": "PETR4", "price": 38.5}]\nThanks')

    assert rows == [{"symbol": "PETR4", "price": 38.5}]
    with pytest.raises(ProviderError):
        parse_quote_reply("no data today")


def test_llm_provider_filters_to_requested_symbols() -> None:
    client = _FakeTextClient(
        '[{"symbol": "PETR4", "price": 38.5, "yield": 0.14, "lastDividendValue": 1.1, "nextPaymentDate": "2025-12-19"},'
        ' {"symbol": "AAPL", "price": 190},'
        ' {"symbol": "VALE3", "price": 0}]'
    )
    provider = LlmQuoteProvider(client)

    records = provider.get_quotes(["PETR4", "VALE3"])

    assert [record.symbol for record in records] == ["PETR4"]
    assert records[0].dividend_yield == 0.14
    assert "PETR4, VALE3" in client.prompts[0]
    assert provider.citations()[0].uri == "llm://grounded-search"


def test_anthropic_client_collects_text(monkeypatch) -> None:
    from b3_master.providers import anthropic_client as anthropic_module

    monkeypatch.setattr(
        anthropic_module,
        "post_json",
        lambda *args, **kwargs: {"content": [{"type": "text", "text": " Diversify. "}]},
    )

    assert AnthropicClient("key", "model").generate_text("hi") == "Diversify."


def test_gemini_client_collects_grounding_sources(monkeypatch) -> None:
    captured = {}

    def fake_post_json(url, provider, payload, timeout_seconds=20.0, headers=None):
        captured["payload"] = payload
        return {
            "candidates": [
                {
                    "content": {"parts": [{"text": "[]"}]},
                    "groundingMetadata": {"groundingChunks": [{"web": {"uri": "https://b3.com.br", "title": "B3"}}]},
                }
            ]
        }

    monkeypatch.setattr(gemini_module, "post_json", fake_post_json)
    client = GeminiClient("key", "gemini-2.5-flash")

    assert client.generate_text("quotes") == "[]"
    assert captured["payload"]["tools"] == [{"google_search": {}}]
    assert client.last_citations[0].title == "B3"
