"""Shared error types for the MCP server."""


class ProtocolError(Exception):
    """Base error for all protocol-layer failures."""


class TransportClosedError(ProtocolError):
    """The transport is not connected or has been closed."""


class ToolNotFoundError(ProtocolError):
    """Requested tool does not exist in the registry."""

    def __init__(self, name: object) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ToolArgumentsError(ProtocolError):
    """Tool arguments failed validation against the tool's input model."""

    def __init__(self, name: str, detail: str = "") -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"Invalid arguments for {name}" + (f": {detail}" if detail else ""))
