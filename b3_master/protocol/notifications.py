"""Resource subscriptions and update notifications for MCP clients."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from threading import Lock
from types import MethodType
from typing import Any

import mcp.types as mcp_types
from mcp.server.fastmcp import FastMCP
from mcp.server.lowlevel.server import NotificationOptions, request_ctx
from mcp.shared.exceptions import McpError

LOGGER = logging.getLogger(__name__)
RESOURCE_NOT_FOUND_CODE = -32002


class ResourceNotifier:
    """Tracks which sessions watch which portfolio URIs and pushes update notices to them."""

    def __init__(self, mcp: FastMCP) -> None:
        self.mcp = mcp
        self._subscribers: dict[str, set[Any]] = defaultdict(set)
        self._lock = Lock()
        self._pending: set[asyncio.Task] = set()
        self._advertise_subscriptions()
        self._register_subscribe_handlers()
        self._register_read_handler()

    def _advertise_subscriptions(self) -> None:
        server = self.mcp._mcp_server
        original_create = server.create_initialization_options

        def create_initialization_options(server_self, notification_options=None, experimental_capabilities=None):
            options = original_create(
                notification_options or NotificationOptions(resources_changed=True),
                experimental_capabilities or {},
            )
            options.capabilities.resources = mcp_types.ResourcesCapability(subscribe=True, listChanged=True)
            return options

        server.create_initialization_options = MethodType(create_initialization_options, server)

    def _register_subscribe_handlers(self) -> None:
        server = self.mcp._mcp_server

        @server.subscribe_resource()
        async def subscribe_resource(uri) -> None:
            context = request_ctx.get(None)
            if context is None:
                return
            with self._lock:
                self._subscribers[str(uri)].add(context.session)

        @server.unsubscribe_resource()
        async def unsubscribe_resource(uri) -> None:
            context = request_ctx.get(None)
            if context is None:
                return
            with self._lock:
                sessions = self._subscribers.get(str(uri))
                if not sessions:
                    return
                sessions.discard(context.session)
                if not sessions:
                    self._subscribers.pop(str(uri), None)

    def _register_read_handler(self) -> None:
        server = self.mcp._mcp_server

        @server.read_resource()
        async def read_resource(uri):
            try:
                return await self.mcp.read_resource(uri)
            except Exception as error:
                if "Unknown resource" in str(error):
                    raise McpError(
                        mcp_types.ErrorData(
                            code=RESOURCE_NOT_FOUND_CODE,
                            message="Resource not found",
                            data={"uri": str(uri)},
                        )
                    ) from error
                LOGGER.exception("resource read failed: uri=%s", uri)
                raise McpError(
                    mcp_types.ErrorData(code=mcp_types.INTERNAL_ERROR, message="Internal error", data=None)
                ) from error

    def subscribed_uris(self) -> list[str]:
        with self._lock:
            return list(self._subscribers.keys())

    async def notify_resource_updated(self, uri: str) -> None:
        with self._lock:
            sessions = list(self._subscribers.get(uri, set()))
        for session in sessions:
            await session.send_resource_updated(uri)

    def notify_resource_updated_sync(self, uri: str) -> None:
        """Schedule a notification from sync code; a no-op outside a running loop."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self.notify_resource_updated(uri))
        self._pending.add(task)
        task.add_done_callback(self._notification_done)

    def _notification_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            LOGGER.warning("resource update notification failed: error=%s", error)
