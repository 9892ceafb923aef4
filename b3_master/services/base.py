"""Shared service orchestration helpers."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from b3_master.cache.ttl_cache import TTLCache

# B3 tickers: 4 letters + 1-2 digits (PETR4, TAEE11); also crypto/fixed-income codes from the catalog.
SYMBOL_PATTERN = re.compile(r"^[A-Z][A-Z0-9_\-]{1,19}$")
T = TypeVar("T")


@dataclass
class ErrorEnvelope:
    code: str
    message: str
    retriable: bool = True
    provider: str | None = None


@dataclass
class ServiceResult(Generic[T]):
    data: T | None
    source: str | None = None
    warning: str | None = None
    error: ErrorEnvelope | None = None
    fetched_at: float | None = None


@dataclass
class ServiceContext:
    providers: dict[str, object]
    cache: TTLCache
    cache_ttl_seconds: int = 60

    def get_provider(self, name: str) -> object | None:
        return self.providers.get(name)


def validate_symbol(symbol: str) -> str:
    clean = symbol.strip().upper()
    if clean.endswith(".SA"):
        clean = clean[:-3]
    if not clean or not SYMBOL_PATTERN.match(clean):
        raise ValueError("Symbol must be 2-20 chars: A-Z, 0-9, underscore, hyphen (e.g. PETR4, HGLG11).")
    return clean


def run_with_cache(
    ctx: ServiceContext,
    cache_key: str,
    call: Callable[[], ServiceResult[T]],
    ttl_seconds: int | None = None,
) -> ServiceResult[T]:
    """Serve a cached result when present; only successful results are stored."""
    cached = ctx.cache.get(cache_key)
    if isinstance(cached, ServiceResult):
        return cached
    value = call()
    value.fetched_at = value.fetched_at or time.time()
    if value.data is not None:
        ctx.cache.set(cache_key, value, ttl_seconds=ttl_seconds or ctx.cache_ttl_seconds)
    return value
