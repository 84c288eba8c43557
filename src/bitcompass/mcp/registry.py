"""Tool registry — static name-to-definition map built once per server.

Each :class:`ToolDefinition` pairs an input model with an async handler. The
registry owns the invocation pipeline: auth gate, argument validation,
handler call, and normalization of every failure into an ``{"error": ...}``
result. Nothing a handler does ever raises past :meth:`ToolRegistry.invoke`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from bitcompass.activity.errors import ActivityLogError
from bitcompass.api.errors import AUTH_REQUIRED_MSG, BackendError
from bitcompass.mcp.errors import ToolArgumentsError

logger = logging.getLogger(__name__)

TIMEOUT_ERROR = "timeout"


class ToolParameters(BaseModel):
    """Base input model for MCP tools.

    Types are strict (no string-to-number coercion); unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore", strict=True, populate_by_name=True)


P = TypeVar("P", bound=ToolParameters)

ToolHandler = Callable[[P], Awaitable[dict[str, Any]]]


def _format_errors(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(part) for part in item["loc"]) or "arguments"
        parts.append(f"{loc}: {item['msg']}")
    return "; ".join(parts)


@dataclass(frozen=True)
class ToolDefinition(Generic[P]):
    """Description of a tool that can be registered with the server.

    Attributes:
        name: Unique name of the tool.
        description: Human-readable description shown to the host.
        parameters_model: Pydantic model used to validate ``arguments``.
        handler: Coroutine function executing the tool against collaborators.
        requires_auth: Whether a stored access token is required.
        failure_message: Fallback ``error`` text for exceptions without one.
    """

    name: str
    description: str
    parameters_model: type[P]
    handler: ToolHandler[P]
    requires_auth: bool = False
    failure_message: str = "Request failed."

    def validate(self, arguments: Mapping[str, Any]) -> P:
        """Validate *arguments* into the tool's input model.

        Raises:
            ToolArgumentsError: If validation fails.
        """
        try:
            return self.parameters_model.model_validate(dict(arguments))
        except ValidationError as error:
            raise ToolArgumentsError(self.name, _format_errors(error)) from error

    def descriptor(self) -> dict[str, Any]:
        """Return the ``tools/list`` entry for this tool."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.parameters_model.model_json_schema(by_alias=True),
        }


class ToolRegistry:
    """Read-only set of tools plus the invocation pipeline.

    Usage::

        registry = ToolRegistry(build_tools(backend), has_access_token=backend.has_access_token)
        tool = registry.get("search-rules")
        result = await registry.invoke(tool, {"query": "pytest"})
    """

    def __init__(
        self,
        tools: Iterable[ToolDefinition[Any]],
        *,
        has_access_token: Callable[[], bool],
        timeout: float | None = None,
    ) -> None:
        table: dict[str, ToolDefinition[Any]] = {}
        for tool in tools:
            if tool.name in table:
                msg = f"Duplicate tool name: {tool.name}"
                raise ValueError(msg)
            table[tool.name] = tool
        self._tools = MappingProxyType(table)
        self._has_access_token = has_access_token
        self._timeout = timeout

    @property
    def tools(self) -> Mapping[str, ToolDefinition[Any]]:
        return self._tools

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def get(self, name: object) -> ToolDefinition[Any] | None:
        if not isinstance(name, str):
            return None
        return self._tools.get(name)

    def descriptors(self) -> list[dict[str, Any]]:
        return [tool.descriptor() for tool in self._tools.values()]

    async def invoke(self, tool: ToolDefinition[Any], arguments: Mapping[str, Any]) -> dict[str, Any]:
        """Run *tool* and return its structured result, never raising."""
        # Credentials are re-read on every gated call.
        if tool.requires_auth and not self._has_access_token():
            return {"error": AUTH_REQUIRED_MSG}

        try:
            params = tool.validate(arguments)
        except ToolArgumentsError as exc:
            return {"error": str(exc)}

        try:
            if self._timeout is None:
                return await tool.handler(params)
            return await asyncio.wait_for(tool.handler(params), self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Tool %s timed out after %ss", tool.name, self._timeout)
            return {"error": TIMEOUT_ERROR}
        except (BackendError, ActivityLogError) as exc:
            return {"error": str(exc) or tool.failure_message}
        except Exception as exc:
            logger.exception("Tool %s failed", tool.name)
            return {"error": str(exc) or tool.failure_message}
