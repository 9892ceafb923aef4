from b3_master.cache.ttl_cache import TTLCache
from b3_master.config.settings import Settings
from b3_master.providers.http import ProviderError
from b3_master.providers.mock import MockQuoteProvider
from b3_master.providers.models import QuoteRecord, SourceCitation
from b3_master.services.base import ServiceContext
from b3_master.services.quote_service import QuoteService, build_quote_providers


class _FailingProvider:
    name = "brapi"

    def __init__(self, code: str = "UPSTREAM") -> None:
        self.code = code
        self.calls = 0

    def get_quotes(self, symbols):
        self.calls += 1
        raise ProviderError("brapi", self.code, "boom", 429 if self.code == "RATE_LIMIT" else 500)

    def get_quote(self, symbol):
        return self.get_quotes([symbol])

    def citations(self):
        return []


class _StaticProvider:
    name = "yahoo"

    def __init__(self) -> None:
        self.calls = 0

    def get_quotes(self, symbols):
        self.calls += 1
        return [QuoteRecord(symbol=symbol, price=10.0, source="yahoo") for symbol in symbols]

    def get_quote(self, symbol):
        self.calls += 1
        return QuoteRecord(symbol=symbol, price=10.0, source="yahoo")

    def citations(self):
        return [SourceCitation(title="B3 / Yahoo Finance", uri="https://finance.yahoo.com")]


def _service(providers: dict, order: list[str] | None = None) -> QuoteService:
    ctx = ServiceContext(providers=providers, cache=TTLCache())
    return QuoteService(ctx, provider_order=order)


def test_first_provider_with_data_wins() -> None:
    failing = _FailingProvider()
    static = _StaticProvider()
    service = _service({"brapi": failing, "yahoo": static, "mock": MockQuoteProvider()}, ["brapi", "yahoo", "mock"])

    batch = service.fetch_quotes(["petr4.sa", "VALE3", "PETR4"])

    assert [record.symbol for record in batch.data] == ["PETR4", "VALE3"]
    assert batch.sources[0].uri == "https://finance.yahoo.com"
    assert failing.calls == 1


def test_total_failure_returns_empty_batch() -> None:
    service = _service({"brapi": _FailingProvider()})

    batch = service.fetch_quotes(["PETR4"])

    assert batch.is_empty
    assert batch.sources == []


def test_invalid_symbols_are_dropped() -> None:
    service = _service({"mock": MockQuoteProvider()})

    assert service.fetch_quotes(["", "!!", "1"]).is_empty
    assert [record.symbol for record in service.fetch_quotes(["PETR4", "$$$"]).data] == ["PETR4"]


def test_rate_limited_provider_is_benched() -> None:
    limited = _FailingProvider(code="RATE_LIMIT")
    service = _service({"brapi": limited, "mock": MockQuoteProvider()}, ["brapi", "mock"])

    service.fetch_quotes(["PETR4"])
    service.fetch_quotes(["VALE3"])

    assert limited.calls == 1
    assert service.provider_status.is_disabled("brapi")


def test_lookup_uses_cache_populated_by_refresh() -> None:
    static = _StaticProvider()
    service = _service({"yahoo": static})

    service.fetch_quotes(["PETR4"])
    result = service.lookup("PETR4")

    assert result.data.price == 10.0
    assert static.calls == 1


def test_lookup_unknown_symbol_reports_error() -> None:
    result = _service({"mock": MockQuoteProvider()}).lookup("ZZZZ9")

    assert result.data is None
    assert result.error is not None


def test_suggest_searches_catalog() -> None:
    assert [asset.symbol for asset in _service({}).suggest("vale")] == ["VALE3"]


def test_build_quote_providers_skips_unconfigured() -> None:
    settings = Settings(quote_providers=("local_api", "llm", "brapi", "mock"), yahoo_finance_enabled=False)

    providers = build_quote_providers(settings)

    assert list(providers) == ["brapi", "mock"]


def test_fetch_quotes_prunes_expired_cache_entries() -> None:
    now = [1000.0]
    cache = TTLCache(default_ttl_seconds=60, clock=lambda: now[0])
    service = QuoteService(ServiceContext(providers={"yahoo": _StaticProvider()}, cache=cache))
    service.fetch_quotes(["PETR4", "VALE3"])

    now[0] += 61
    service.fetch_quotes(["ITUB4"])

    assert len(cache) == 1
    assert cache.get("quote:ITUB4").data.symbol == "ITUB4"
