"""Application entrypoint for the B3 Master portfolio MCP server."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from dataclasses import asdict, dataclass
from typing import Callable

from mcp.server.fastmcp import FastMCP
from starlette.responses import JSONResponse, Response

from b3_master.cache.ttl_cache import TTLCache
from b3_master.config.settings import Settings, get_settings
from b3_master.portfolio.data_loader import frame_to_items, load_holdings_frame
from b3_master.portfolio.models import PortfolioItem
from b3_master.portfolio.portfolio_service import PortfolioService
from b3_master.portfolio.store import PortfolioStore
from b3_master.portfolio.validation import blocking_issues, validate_holdings_frame
from b3_master.prompts.portfolio_prompts import register_portfolio_prompts
from b3_master.protocol.notifications import ResourceNotifier
from b3_master.providers.mock import MOCK_ASSETS
from b3_master.resources.portfolio_resources import register_portfolio_resources
from b3_master.runtime.monitoring import ServerMetrics
from b3_master.services.advice_service import AdviceService, build_llm_client
from b3_master.services.base import ServiceContext
from b3_master.services.provider_status import ProviderStatus
from b3_master.services.quote_service import QuoteService, build_quote_providers
from b3_master.tools.registry import build_tool_services, register_all_tools

LOGGER = logging.getLogger(__name__)


class InitializationError(RuntimeError):
    """Startup could not build a usable portfolio; the process should exit and be restarted."""


@dataclass
class Application:
    settings: Settings
    portfolio: PortfolioService
    provider_status: ProviderStatus


def resolve_transport_mode(configured_mode: str) -> str:
    if os.getenv("RENDER") and configured_mode == "stdio":
        return "http"
    if configured_mode in {"stdio", "http"}:
        return configured_mode
    if os.getenv("RENDER") or os.getenv("PORT"):
        return "http"
    return "stdio"


def resolve_http_transport(configured_transport: str) -> str:
    if configured_transport in {"sse", "streamable"}:
        return configured_transport
    return "sse"


def load_initial_holdings(file_path: str) -> list[PortfolioItem]:
    try:
        frame = load_holdings_frame(file_path)
    except (OSError, ValueError) as error:
        raise InitializationError(f"Could not read portfolio file {file_path}: {error}") from error
    issues = blocking_issues(validate_holdings_frame(frame))
    if issues:
        details = "; ".join(f"{issue.field}@{issue.row}: {issue.message}" for issue in issues[:5])
        raise InitializationError(f"Invalid portfolio file {file_path}: {details}")
    return frame_to_items(frame)


def build_application(
    settings: Settings,
    resource_updated_callback: Callable[[str], None] | None = None,
) -> Application:
    quote_llm = build_llm_client(settings, grounded=True) if "llm" in settings.quote_providers else None
    ctx = ServiceContext(
        providers=build_quote_providers(settings, llm_client=quote_llm),
        cache=TTLCache(default_ttl_seconds=settings.cache_ttl_quote_seconds),
        cache_ttl_seconds=settings.cache_ttl_quote_seconds,
    )
    if not ctx.providers:
        raise InitializationError("No quote providers configured. Check QUOTE_PROVIDERS.")
    provider_status = ProviderStatus()
    quotes = QuoteService(
        ctx,
        provider_order=settings.quote_providers,
        provider_status=provider_status,
        rate_limit_disable_seconds=settings.rate_limit_disable_seconds,
    )
    try:
        advice = AdviceService(settings.advice_mode, build_llm_client(settings))
    except ValueError as error:
        raise InitializationError(str(error)) from error
    if settings.initial_cash_balance < 0:
        raise InitializationError("INITIAL_CASH_BALANCE must be zero or positive.")

    holdings = load_initial_holdings(settings.portfolio_file) if settings.portfolio_file else []
    store = PortfolioStore(market_assets=MOCK_ASSETS, holdings=holdings, cash_balance=settings.initial_cash_balance)
    LOGGER.info(
        "application built: providers=%s advice_mode=%s holdings=%s",
        ",".join(ctx.providers),
        advice.mode,
        len(holdings),
    )
    return Application(
        settings=settings,
        portfolio=PortfolioService(store, quotes, advice, resource_updated_callback=resource_updated_callback),
        provider_status=provider_status,
    )


async def run(settings: Settings) -> None:
    server_metrics = ServerMetrics()
    mcp = FastMCP(name=settings.app_name, host=settings.host, port=settings.port)
    notifier = ResourceNotifier(mcp)
    app = build_application(settings, resource_updated_callback=notifier.notify_resource_updated_sync)
    services = build_tool_services(app.portfolio, server_metrics)
    register_all_tools(mcp, services)
    register_portfolio_prompts(mcp, services)
    register_portfolio_resources(mcp, services)
    resolved_mode = resolve_transport_mode(settings.transport_mode)
    resolved_http_transport = resolve_http_transport(settings.http_transport)

    @mcp.custom_route(settings.health_path, methods=["GET"])
    async def health_check(_: object) -> Response:
        snapshot = server_metrics.snapshot(app.provider_status.snapshot())
        store = app.portfolio.store
        return JSONResponse(
            {
                "status": "ok",
                "service": settings.app_name,
                "version": settings.app_version,
                "mode": resolved_mode,
                "holdings": len(store.holdings),
                "last_sync": store.last_sync.isoformat() if store.last_sync else None,
                "is_syncing": store.is_syncing,
                "metrics": asdict(snapshot),
            }
        )

    stop_event = asyncio.Event()
    background: list[asyncio.Task] = [asyncio.create_task(app.portfolio.refresh())]
    if settings.price_ticker_enabled:
        background.append(
            asyncio.create_task(app.portfolio.run_price_ticker(settings.price_ticker_interval_seconds, stop_event))
        )
    try:
        if resolved_mode == "stdio":
            await mcp.run_stdio_async()
        elif resolved_http_transport == "streamable":
            await mcp.run_streamable_http_async()
        else:
            await mcp.run_sse_async()
    finally:
        stop_event.set()
        await asyncio.gather(*background, return_exceptions=True)


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        asyncio.run(run(settings))
    except InitializationError as error:
        LOGGER.error("startup failed: %s", error)
        sys.exit(1)


if __name__ == "__main__":
    main()
