"""BitCompass CLI — shared rules, solutions, activity logs, and an MCP server."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from bitcompass.backend import SupabaseBackend as SupabaseBackend
    from bitcompass.mcp.server import MCPServer as MCPServer
    from bitcompass.mcp.server import start_mcp_server as start_mcp_server

_LAZY_EXPORTS = {
    "SupabaseBackend": "bitcompass.backend",
    "MCPServer": "bitcompass.mcp.server",
    "start_mcp_server": "bitcompass.mcp.server",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'bitcompass' has no attribute {name!r}")
