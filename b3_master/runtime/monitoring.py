"""Structured tool logging and health metrics aggregation."""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any

LOGGER = logging.getLogger(__name__)
SLOW_TOOL_MS = 2000.0


@dataclass
class HealthSnapshot:
    uptime_seconds: float
    total_requests: int
    error_rate: float
    avg_latency_ms: float
    provider_status: dict[str, Any]
    tool_counts: dict[str, int] = field(default_factory=dict)


class ServerMetrics:
    def __init__(self, started_at: float | None = None) -> None:
        self.started_at = started_at or time.time()
        self._lock = threading.Lock()
        self.total_requests = 0
        self.error_requests = 0
        self.total_latency_ms = 0.0
        self.tool_counts: dict[str, int] = {}

    def record(self, tool: str, latency_ms: float, success: bool) -> None:
        with self._lock:
            self.total_requests += 1
            self.tool_counts[tool] = self.tool_counts.get(tool, 0) + 1
            if not success:
                self.error_requests += 1
            self.total_latency_ms += max(0.0, latency_ms)

    def snapshot(self, provider_status: dict[str, Any]) -> HealthSnapshot:
        with self._lock:
            requests = self.total_requests
            avg_latency = (self.total_latency_ms / requests) if requests else 0.0
            error_rate = (self.error_requests / requests) if requests else 0.0
            counts = dict(self.tool_counts)
        return HealthSnapshot(
            uptime_seconds=max(0.0, time.time() - self.started_at),
            total_requests=requests,
            error_rate=error_rate,
            avg_latency_ms=avg_latency,
            provider_status=provider_status,
            tool_counts=counts,
        )


def log_tool_event(
    tool: str,
    symbol: str | None,
    latency_ms: float,
    success: bool,
    warning: str | None = None,
) -> None:
    payload: dict[str, Any] = {
        "tool": tool,
        "symbol": symbol,
        "latency_ms": round(latency_ms, 3),
        "success": success,
        "timestamp": int(time.time()),
    }
    if warning is None and latency_ms > SLOW_TOOL_MS:
        warning = "slow_response"
    if warning:
        payload["warning"] = warning
    # stdout is reserved for the stdio transport.
    LOGGER.info(json.dumps(payload, ensure_ascii=True))
