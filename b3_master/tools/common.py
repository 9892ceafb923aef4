"""Shared tool-layer helpers."""

from __future__ import annotations

import time
from typing import Any, Awaitable, Callable

from b3_master.runtime.monitoring import log_tool_event
from b3_master.runtime.response import error_response


def _finish(services: Any, tool: str, symbol: str | None, started: float, success: bool) -> None:
    latency_ms = (time.perf_counter() - started) * 1000.0
    metrics = getattr(services, "metrics", None)
    if metrics is not None:
        metrics.record(tool=tool, latency_ms=latency_ms, success=success)
    log_tool_event(tool=tool, symbol=symbol, latency_ms=latency_ms, success=success)


def run_tool(services: Any, tool: str, call: Callable[[], str], symbol: str | None = None) -> str:
    """Run a tool body, turning input errors into an error payload."""
    started = time.perf_counter()
    try:
        result = call()
    except ValueError as error:
        _finish(services, tool, symbol, started, success=False)
        return error_response("INVALID_INPUT", str(error))
    _finish(services, tool, symbol, started, success=True)
    return result


async def run_tool_async(
    services: Any,
    tool: str,
    call: Callable[[], Awaitable[str]],
    symbol: str | None = None,
) -> str:
    started = time.perf_counter()
    try:
        result = await call()
    except ValueError as error:
        _finish(services, tool, symbol, started, success=False)
        return error_response("INVALID_INPUT", str(error))
    _finish(services, tool, symbol, started, success=True)
    return result
