"""Quote orchestration over the configured provider chain."""

from __future__ import annotations

import logging

from b3_master.config.settings import Settings
from b3_master.portfolio.models import Asset
from b3_master.providers.brapi import BrapiClient
from b3_master.providers.llm_quotes import LlmQuoteProvider
from b3_master.providers.local_api import LocalApiClient
from b3_master.providers.mock import MockQuoteProvider, search_catalog
from b3_master.providers.models import QuoteBatch, QuoteProvider, QuoteRecord, TextGenerator
from b3_master.providers.yahoo_finance import YahooFinanceClient
from b3_master.services.base import ServiceContext, ServiceResult, run_with_cache, validate_symbol
from b3_master.services.fallback_manager import FallbackManager, ProviderAttempt
from b3_master.services.provider_status import ProviderStatus

LOGGER = logging.getLogger(__name__)
PROVIDER_LABELS = {
    "mock": "Offline Catalog",
    "yahoo": "Yahoo Finance",
    "local_api": "Local B3 API",
    "brapi": "brapi.dev",
    "llm": "LLM Search",
}


def build_quote_providers(settings: Settings, llm_client: TextGenerator | None = None) -> dict[str, object]:
    """Instantiate the providers named in ``settings.quote_providers``; unconfigured ones are skipped."""
    timeout = settings.request_timeout_seconds
    providers: dict[str, object] = {}
    for key in settings.quote_providers:
        if key == "mock":
            providers[key] = MockQuoteProvider()
        elif key == "yahoo" and settings.yahoo_finance_enabled:
            providers[key] = YahooFinanceClient(timeout)
        elif key == "brapi":
            providers[key] = BrapiClient(settings.brapi_token, timeout)
        elif key == "local_api" and settings.local_api_base_url:
            providers[key] = LocalApiClient(settings.local_api_base_url, timeout)
        elif key == "llm" and llm_client is not None:
            providers[key] = LlmQuoteProvider(llm_client)
        else:
            LOGGER.warning("quote provider not configured, skipping: provider=%s", key)
    return providers


class QuoteService:
    def __init__(
        self,
        ctx: ServiceContext,
        provider_order: list[str] | tuple[str, ...] | None = None,
        provider_status: ProviderStatus | None = None,
        rate_limit_disable_seconds: int = 60 * 60,
    ) -> None:
        self.ctx = ctx
        self.provider_order = list(provider_order or ctx.providers.keys())
        self.provider_status = provider_status or ProviderStatus()
        self.fallback_manager = FallbackManager(
            provider_status=self.provider_status,
            default_disable_seconds=rate_limit_disable_seconds,
        )

    def _provider(self, key: str) -> QuoteProvider | None:
        provider = self.ctx.get_provider(key)
        return provider if hasattr(provider, "get_quotes") else None  # type: ignore[return-value]

    def _label(self, key: str) -> str:
        return PROVIDER_LABELS.get(key, key)

    def _normalize(self, symbols: list[str]) -> list[str]:
        clean: dict[str, None] = {}
        for symbol in symbols:
            if not symbol:
                continue
            try:
                clean.setdefault(validate_symbol(symbol), None)
            except ValueError:
                LOGGER.warning("dropping invalid symbol from quote request: symbol=%r", symbol)
        return list(clean)

    def _batch_call(self, key: str, symbols: list[str]):
        def _call() -> QuoteBatch | None:
            provider = self._provider(key)
            if provider is None:
                return None
            records = provider.get_quotes(symbols)
            if not records:
                return None
            return QuoteBatch(data=records, sources=provider.citations())

        return _call

    def fetch_quotes(self, symbols: list[str]) -> QuoteBatch:
        """Fetch quotes from the first provider that answers; an empty batch when all fail."""
        clean = self._normalize(symbols)
        if not clean:
            return QuoteBatch()
        result: ServiceResult[QuoteBatch] = self.fallback_manager.execute(
            operation="fetch_quotes",
            subject=",".join(clean),
            attempts=[
                ProviderAttempt(key, self._label(key), self._batch_call(key, clean))
                for key in self.provider_order
                if self._provider(key) is not None
            ],
        )
        if result.data is None:
            LOGGER.warning(
                "quote refresh returned no data: symbols=%s code=%s",
                len(clean),
                result.error.code if result.error else None,
            )
            return QuoteBatch()
        self.ctx.cache.prune()
        for record in result.data.data:
            self.ctx.cache.set(f"quote:{record.symbol}", ServiceResult(data=record, source=result.source))
        return result.data

    def lookup(self, symbol: str) -> ServiceResult[QuoteRecord]:
        clean = validate_symbol(symbol)

        def _attempt(key: str):
            def _call() -> QuoteRecord | None:
                provider = self._provider(key)
                return provider.get_quote(clean) if provider is not None else None

            return _call

        return run_with_cache(
            self.ctx,
            f"quote:{clean}",
            lambda: self.fallback_manager.execute(
                operation="lookup",
                subject=clean,
                attempts=[
                    ProviderAttempt(key, self._label(key), _attempt(key))
                    for key in self.provider_order
                    if self._provider(key) is not None
                ],
            ),
        )

    def suggest(self, term: str, limit: int = 5) -> list[Asset]:
        return search_catalog(term, limit=limit)
