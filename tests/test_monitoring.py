import asyncio
import json
import logging

from mcp.server.fastmcp import FastMCP

from b3_master.protocol.notifications import ResourceNotifier
from b3_master.runtime.monitoring import ServerMetrics, log_tool_event


def test_metrics_snapshot_aggregates_latency_and_errors() -> None:
    metrics = ServerMetrics(started_at=1.0)
    metrics.record("portfolio_summary", 10.0, True)
    metrics.record("add_holding", 30.0, False)

    snapshot = metrics.snapshot({"brapi": {"disabled_until": 2.0, "reason": "rate_limit"}})

    assert snapshot.total_requests == 2
    assert snapshot.error_rate == 0.5
    assert snapshot.avg_latency_ms == 20.0
    assert snapshot.tool_counts == {"portfolio_summary": 1, "add_holding": 1}
    assert "brapi" in snapshot.provider_status


def test_tool_event_is_logged_as_json(caplog) -> None:
    caplog.set_level(logging.INFO, logger="b3_master.runtime.monitoring")

    log_tool_event(tool="lookup_asset", symbol="PETR4", latency_ms=2500.0, success=True)

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["tool"] == "lookup_asset"
    assert payload["warning"] == "slow_response"


def test_notifier_is_silent_without_subscribers() -> None:
    notifier = ResourceNotifier(FastMCP(name="test-notifier"))

    notifier.notify_resource_updated_sync("portfolio://current")
    asyncio.run(notifier.notify_resource_updated("portfolio://current"))

    assert notifier.subscribed_uris() == []
