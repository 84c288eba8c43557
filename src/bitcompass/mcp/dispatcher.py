"""ProtocolDispatcher — routes one JSON-RPC message to its method handler.

``dispatch`` returns the response to write, or ``None`` for notifications.
It never raises: unexpected exceptions become ``-32603`` errors for
requests, and go to the ``on_unhandled_error`` observer for notifications.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from bitcompass import __version__
from bitcompass.config.settings import ServerSettings
from bitcompass.mcp.errors import ProtocolError, ToolNotFoundError
from bitcompass.mcp.models import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    NEEDS_AUTH,
    NEEDS_AUTH_INSTRUCTIONS,
    NEEDS_AUTH_MESSAGE,
    IncomingMessage,
    JsonRpcResponse,
    text_content,
)
from bitcompass.mcp.prompts import get_prompt_messages, list_prompts
from bitcompass.mcp.registry import ToolRegistry
from bitcompass.utils.telemetry import (
    ATTR_MCP_METHOD,
    ATTR_MCP_REQUEST_ID,
    ATTR_TOOL_NAME,
    ATTR_TOOL_OUTCOME,
    get_tracer,
)

logger = logging.getLogger(__name__)

_tracer = get_tracer(__name__)

INITIALIZED_NOTIFICATION = "notifications/initialized"

# Returned by a method handler that must not be answered.
_NO_RESPONSE = object()

UnhandledErrorObserver = Callable[[BaseException, IncomingMessage], None]


class MethodError(ProtocolError):
    """A JSON-RPC error to send back on the request's id."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        self.code = code
        self.data = data
        super().__init__(message)


def _default_observer(exc: BaseException, message: IncomingMessage) -> None:
    logger.error("Unhandled error in notification %s", message.method, exc_info=exc)


class ProtocolDispatcher:
    """Method table for the stdio MCP server.

    Usage::

        dispatcher = ProtocolDispatcher(registry, has_access_token=store.has_access_token)
        response = await dispatcher.dispatch(message)
        if response is not None:
            await transport.send(response.to_wire())
    """

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        has_access_token: Callable[[], bool],
        settings: ServerSettings | None = None,
        on_unhandled_error: UnhandledErrorObserver | None = None,
    ) -> None:
        self._registry = registry
        self._has_access_token = has_access_token
        self._settings = settings or ServerSettings()
        self._on_unhandled_error = on_unhandled_error or _default_observer
        self._methods: dict[str, Callable[[IncomingMessage], Awaitable[Any]]] = {
            "initialize": self._initialize,
            "notified": self._notified,
            INITIALIZED_NOTIFICATION: self._initialized,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
            "prompts/list": self._prompts_list,
            "prompts/get": self._prompts_get,
        }

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def dispatch(self, message: IncomingMessage) -> JsonRpcResponse | None:
        with _tracer.start_as_current_span("mcp.request") as span:
            span.set_attribute(ATTR_MCP_METHOD, str(message.method))
            if message.id is not None:
                span.set_attribute(ATTR_MCP_REQUEST_ID, str(message.id))
            try:
                result = await self._route(message)
            except MethodError as exc:
                if message.is_notification:
                    return None
                return JsonRpcResponse.failure(message.id, exc.code, str(exc), exc.data)
            except Exception as exc:
                if message.is_notification:
                    self._observe(exc, message)
                    return None
                logger.exception("Error handling %s", message.method)
                span.record_exception(exc)
                return JsonRpcResponse.failure(message.id, INTERNAL_ERROR, str(exc))

            if message.is_notification or result is _NO_RESPONSE:
                return None
            return JsonRpcResponse.success(message.id, result)

    async def _route(self, message: IncomingMessage) -> Any:
        handler = self._methods.get(message.method) if isinstance(message.method, str) else None
        if handler is None:
            raise MethodError(METHOD_NOT_FOUND, "Method not found")
        return await handler(message)

    def _observe(self, exc: BaseException, message: IncomingMessage) -> None:
        try:
            self._on_unhandled_error(exc, message)
        except Exception:
            logger.exception("on_unhandled_error observer failed")

    # -- methods -----------------------------------------------------------

    async def _initialize(self, message: IncomingMessage) -> dict[str, Any]:
        # Auth state is re-read on every call.
        if not self._has_access_token():
            raise MethodError(
                NEEDS_AUTH,
                NEEDS_AUTH_MESSAGE,
                {"action": "Login", "instructions": NEEDS_AUTH_INSTRUCTIONS},
            )
        return {
            "protocolVersion": self._settings.protocol_version,
            "capabilities": {"tools": {}, "prompts": {}},
            "serverInfo": {"name": self._settings.name, "version": __version__},
        }

    async def _notified(self, message: IncomingMessage) -> Any:
        if message.param("method") == INITIALIZED_NOTIFICATION:
            return _NO_RESPONSE
        raise MethodError(METHOD_NOT_FOUND, "Method not found")

    async def _initialized(self, message: IncomingMessage) -> Any:
        return _NO_RESPONSE

    async def _tools_list(self, message: IncomingMessage) -> dict[str, Any]:
        return {"tools": self._registry.descriptors()}

    async def _tools_call(self, message: IncomingMessage) -> dict[str, Any]:
        name = message.param("name")
        tool = self._registry.get(name)
        if tool is None:
            raise MethodError(METHOD_NOT_FOUND, str(ToolNotFoundError(name or "")))

        arguments = message.param("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise MethodError(
                METHOD_NOT_FOUND, f"Malformed tools/call: arguments for {tool.name} must be an object"
            )

        with _tracer.start_as_current_span("mcp.tools.call") as span:
            span.set_attribute(ATTR_TOOL_NAME, tool.name)
            result = await self._registry.invoke(tool, arguments)
            span.set_attribute(ATTR_TOOL_OUTCOME, "error" if "error" in result else "ok")

        text = json.dumps(result, separators=(",", ":"), ensure_ascii=False)
        return {"content": [text_content(text)]}

    async def _prompts_list(self, message: IncomingMessage) -> dict[str, Any]:
        return {"prompts": list_prompts()}

    async def _prompts_get(self, message: IncomingMessage) -> dict[str, Any]:
        messages = get_prompt_messages(message.param("name"))
        if messages is None:
            raise MethodError(INVALID_PARAMS, "Unknown prompt")
        return {"messages": messages}

