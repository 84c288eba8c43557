"""MCPServer — one stdio MCP session over a transport.

Owns the tool registry, the protocol dispatcher and the session's framer.
All mutable session state (carry-over buffer, queue, single-flight flag)
lives on the instance, so independent servers can coexist in one process.
"""

from __future__ import annotations

import logging
from typing import Any

from bitcompass.config.project import get_project_config
from bitcompass.config.settings import ServerSettings
from bitcompass.mcp.backend import Backend
from bitcompass.mcp.dispatcher import ProtocolDispatcher, UnhandledErrorObserver
from bitcompass.mcp.framing import DropHook, MessageFramer
from bitcompass.mcp.models import IncomingMessage, JsonRpcResponse
from bitcompass.mcp.registry import ToolRegistry
from bitcompass.mcp.tools import build_tools
from bitcompass.mcp.transport import MCPTransport, StdioTransport

logger = logging.getLogger(__name__)


class MCPServer:
    """Stdio MCP server for BitCompass.

    Usage::

        server = MCPServer(SupabaseBackend())
        await server.serve(StdioTransport())
    """

    def __init__(
        self,
        backend: Backend,
        settings: ServerSettings | None = None,
        *,
        on_drop: DropHook | None = None,
        on_unhandled_error: UnhandledErrorObserver | None = None,
    ) -> None:
        self._backend = backend
        self._settings = settings or ServerSettings()
        self._on_drop = on_drop
        self._registry = ToolRegistry(
            build_tools(backend),
            has_access_token=backend.has_access_token,
            timeout=self._settings.tool_timeout,
        )
        self._dispatcher = ProtocolDispatcher(
            self._registry,
            has_access_token=backend.has_access_token,
            settings=self._settings,
            on_unhandled_error=on_unhandled_error,
        )
        self._transport: MCPTransport | None = None
        self._framer: MessageFramer | None = None

    @property
    def settings(self) -> ServerSettings:
        return self._settings

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def handle(self, message: IncomingMessage | dict[str, Any]) -> JsonRpcResponse | None:
        """Process a single message and return its response, if any."""
        if isinstance(message, dict):
            message = IncomingMessage.model_validate(message)
        return await self._dispatcher.dispatch(message)

    async def serve(self, transport: MCPTransport) -> None:
        """Read from *transport* until EOF, answering in arrival order."""
        self._transport = transport
        self._framer = MessageFramer(self._process, on_drop=self._on_drop)
        await transport.connect()
        logger.info("MCP server %s listening", self._settings.name)
        try:
            while True:
                chunk = await transport.receive()
                if not chunk:
                    break
                self._framer.feed(chunk)
        finally:
            # Requests already framed are still answered when the read side fails.
            try:
                await self._framer.join()
            finally:
                if self._framer.buffered.strip():
                    logger.debug("Ignoring unterminated trailing input")
                await transport.close()
                self._transport = None
        logger.info("MCP server %s stopped", self._settings.name)

    async def _process(self, message: IncomingMessage) -> None:
        response = await self._dispatcher.dispatch(message)
        if response is not None and self._transport is not None:
            await self._transport.send(response.to_wire())


async def start_mcp_server(
    backend: Backend | None = None,
    settings: ServerSettings | None = None,
    transport: MCPTransport | None = None,
) -> None:
    """Serve BitCompass over stdio until stdin closes.

    Stays up when not logged in: ``initialize`` reports the auth error and the
    host keeps the process for its handshake.
    """
    if backend is None:
        from bitcompass.backend import SupabaseBackend

        backend = SupabaseBackend()
    get_project_config(warn_if_missing=True)
    server = MCPServer(backend, settings or ServerSettings.from_env())
    await server.serve(transport or StdioTransport())
