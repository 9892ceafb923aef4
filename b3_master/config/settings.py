"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

DEFAULT_QUOTE_PROVIDERS = ("brapi", "yahoo", "mock")


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the portfolio server and its quote/advice sources."""

    app_name: str = "b3-master"
    app_version: str = "1.0.0"
    transport_mode: str = "auto"
    http_transport: str = "sse"
    host: str = "0.0.0.0"
    port: int = 8000
    health_path: str = "/health"
    log_level: str = "INFO"
    quote_providers: tuple[str, ...] = field(default=DEFAULT_QUOTE_PROVIDERS)
    brapi_token: str | None = None
    local_api_base_url: str | None = None
    yahoo_finance_enabled: bool = True
    advice_mode: str = "heuristic"
    llm_provider: str = "anthropic"
    claude_api_key: str | None = None
    claude_model: str = "claude-sonnet-4-5-20250929"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash"
    request_timeout_seconds: float = 15.0
    cache_ttl_quote_seconds: int = 60
    rate_limit_disable_seconds: int = 60 * 60
    portfolio_file: str | None = None
    initial_cash_balance: float = 0.0
    price_ticker_enabled: bool = False
    price_ticker_interval_seconds: float = 2.0


def _as_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _as_float(value: str | None, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _as_list(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None or value.strip() == "":
        return default
    items = tuple(part.strip().lower() for part in value.split(",") if part.strip())
    return items or default


def get_settings() -> Settings:
    """Load runtime settings from environment variables."""
    load_dotenv()

    return Settings(
        app_name=os.getenv("APP_NAME", "b3-master"),
        transport_mode=os.getenv("TRANSPORT_MODE", "auto").strip().lower(),
        http_transport=os.getenv("HTTP_TRANSPORT", "sse").strip().lower(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_as_int(os.getenv("PORT"), 8000),
        health_path=os.getenv("HEALTH_PATH", "/health"),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
        quote_providers=_as_list(os.getenv("QUOTE_PROVIDERS"), DEFAULT_QUOTE_PROVIDERS),
        brapi_token=os.getenv("BRAPI_TOKEN") or None,
        local_api_base_url=os.getenv("LOCAL_API_BASE_URL") or None,
        yahoo_finance_enabled=_as_bool(os.getenv("YAHOO_FINANCE_ENABLED"), True),
        advice_mode=os.getenv("ADVICE_MODE", "heuristic").strip().lower(),
        llm_provider=os.getenv("LLM_PROVIDER", "anthropic").strip().lower(),
        claude_api_key=os.getenv("CLAUDE_API_KEY") or os.getenv("ANTHROPIC_API_KEY"),
        claude_model=(
            os.getenv("CLAUDE_MODEL")
            or os.getenv("ANTHROPIC_MODEL")
            or "claude-sonnet-4-5-20250929"
        ),
        gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY"),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        request_timeout_seconds=_as_float(os.getenv("REQUEST_TIMEOUT_SECONDS"), 15.0),
        cache_ttl_quote_seconds=_as_int(os.getenv("CACHE_TTL_QUOTE_SECONDS"), 60),
        rate_limit_disable_seconds=_as_int(os.getenv("RATE_LIMIT_DISABLE_SECONDS"), 60 * 60),
        portfolio_file=os.getenv("PORTFOLIO_FILE") or None,
        initial_cash_balance=_as_float(os.getenv("INITIAL_CASH_BALANCE"), 0.0),
        price_ticker_enabled=_as_bool(os.getenv("PRICE_TICKER_ENABLED"), False),
        price_ticker_interval_seconds=_as_float(os.getenv("PRICE_TICKER_INTERVAL_SECONDS"), 2.0),
    )
