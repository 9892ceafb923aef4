from b3_master.providers.http import ProviderError
from b3_master.services.fallback_manager import GENERIC_QUOTE_ERROR, FallbackManager, ProviderAttempt
from b3_master.services.provider_status import ProviderStatus


def test_fallback_manager_disables_rate_limited_provider_and_skips_while_disabled() -> None:
    status = ProviderStatus()
    manager = FallbackManager(provider_status=status, rate_limit_disable_seconds={"brapi": 60})
    calls = {"brapi": 0, "yahoo": 0}

    def brapi_call():
        calls["brapi"] += 1
        raise ProviderError("brapi", "RATE_LIMIT", "too many requests", 429)

    def yahoo_call():
        calls["yahoo"] += 1
        return ["PETR4"]

    attempts = [ProviderAttempt("brapi", "brapi.dev", brapi_call), ProviderAttempt("yahoo", "Yahoo Finance", yahoo_call)]

    first = manager.execute(operation="fetch_quotes", subject="PETR4", attempts=attempts)
    assert first.data == ["PETR4"]
    assert first.source == "Yahoo Finance"
    assert first.warning is not None
    assert status.is_disabled("brapi") is True

    second = manager.execute(operation="fetch_quotes", subject="PETR4", attempts=attempts)
    assert second.source == "Yahoo Finance"
    assert calls == {"brapi": 1, "yahoo": 2}


def test_empty_results_fall_through_to_next_provider() -> None:
    manager = FallbackManager(provider_status=ProviderStatus())

    result = manager.execute(
        operation="fetch_quotes",
        subject="PETR4",
        attempts=[
            ProviderAttempt("llm", "LLM Search", lambda: []),
            ProviderAttempt("mock", "Offline Catalog", lambda: ["PETR4"]),
        ],
    )

    assert result.source == "Offline Catalog"


def test_all_failures_return_generic_error() -> None:
    def boom():
        raise RuntimeError("parser exploded")

    def not_found():
        raise ProviderError("brapi", "NOT_FOUND", "missing", 404)

    status = ProviderStatus()
    result = FallbackManager(provider_status=status).execute(
        operation="lookup",
        subject="XXXX3",
        attempts=[ProviderAttempt("yahoo", "Yahoo Finance", boom), ProviderAttempt("brapi", "brapi.dev", not_found)],
    )

    assert result.data is None
    assert result.error is not None
    assert result.error.code == "UPSTREAM"
    assert result.error.message == GENERIC_QUOTE_ERROR
    assert status.snapshot() == {}


def test_rate_limit_detected_from_message() -> None:
    assert FallbackManager.is_rate_limited(ProviderError("brapi", "UPSTREAM", "Quota exceeded for today"))
    assert not FallbackManager.is_rate_limited(ProviderError("brapi", "UPSTREAM", "Internal error", 500))


def test_provider_status_window_can_be_lifted() -> None:
    status = ProviderStatus()
    status.disable_provider("yahoo", 120)

    assert "yahoo" in status.snapshot()
    status.enable_provider("yahoo")
    assert status.is_disabled("yahoo") is False
