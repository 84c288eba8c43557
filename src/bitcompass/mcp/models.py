"""MCP models — JSON-RPC 2.0 messages exchanged over stdio.

Incoming messages are parsed leniently: a message may lack ``id`` or even
``method``, and any id other than an object or array is kept exactly as
sent. Outgoing responses always carry exactly one of ``result`` or
``error``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------

METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
# Application-level: the host renders this as "needs authentication".
NEEDS_AUTH = -32001

NEEDS_AUTH_MESSAGE = "Needs authentication"
NEEDS_AUTH_INSTRUCTIONS = (
    "Run `bitcompass login` in a terminal, then restart the MCP server in your editor."
)

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class IncomingMessage(BaseModel):
    """A request or notification read from the input stream."""

    model_config = ConfigDict(extra="allow")

    jsonrpc: Any = None
    id: Any = None
    method: Any = None
    params: Any = None

    @field_validator("id")
    @classmethod
    def check_id(cls, value: Any) -> Any:
        # Ids are echoed back verbatim; only structured values are rejected.
        if isinstance(value, (dict, list)):
            msg = "id must be a string or a number"
            raise ValueError(msg)
        return value

    @property
    def is_notification(self) -> bool:
        return self.id is None

    def param(self, key: str) -> Any:
        """Look up ``params[key]``, tolerating missing or non-object params."""
        if isinstance(self.params, dict):
            return self.params.get(key)
        return None


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message."""

    jsonrpc: str = "2.0"
    id: Any
    result: Any = None
    error: JsonRpcError | None = None

    @classmethod
    def success(cls, request_id: Any, result: Any) -> JsonRpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(
        cls, request_id: Any, code: int, message: str, data: Any = None
    ) -> JsonRpcResponse:
        return cls(id=request_id, error=JsonRpcError(code=code, message=message, data=data))

    def to_wire(self) -> dict[str, Any]:
        """Serialize with exactly one of ``result`` / ``error``."""
        wire: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            wire["error"] = self.error.model_dump(exclude_none=True)
        else:
            wire["result"] = self.result
        return wire


# ---------------------------------------------------------------------------
# MCP-specific payloads
# ---------------------------------------------------------------------------


class PromptDescriptor(BaseModel):
    """A prompt template as returned by ``prompts/list``."""

    name: str
    title: str
    description: str


def text_content(text: str) -> dict[str, Any]:
    """A single ``{"type": "text"}`` content block."""
    return {"type": "text", "text": text}
