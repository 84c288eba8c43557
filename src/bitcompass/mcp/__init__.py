"""MCP server — newline-delimited JSON-RPC over stdio."""

from bitcompass.mcp.backend import Backend
from bitcompass.mcp.dispatcher import ProtocolDispatcher
from bitcompass.mcp.errors import (
    ProtocolError,
    ToolArgumentsError,
    ToolNotFoundError,
    TransportClosedError,
)
from bitcompass.mcp.framing import MessageFramer
from bitcompass.mcp.models import IncomingMessage, JsonRpcError, JsonRpcResponse
from bitcompass.mcp.registry import ToolDefinition, ToolParameters, ToolRegistry
from bitcompass.mcp.server import MCPServer, start_mcp_server
from bitcompass.mcp.transport import MCPTransport, StdioTransport, StreamTransport

__all__ = [
    "Backend",
    "IncomingMessage",
    "JsonRpcError",
    "JsonRpcResponse",
    "MCPServer",
    "MCPTransport",
    "MessageFramer",
    "ProtocolDispatcher",
    "ProtocolError",
    "StdioTransport",
    "StreamTransport",
    "ToolArgumentsError",
    "ToolDefinition",
    "ToolNotFoundError",
    "ToolParameters",
    "ToolRegistry",
    "TransportClosedError",
    "start_mcp_server",
]
