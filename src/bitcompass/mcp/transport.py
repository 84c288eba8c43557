"""MCP transports — byte stream in, newline-delimited JSON out.

Each transport satisfies the :class:`MCPTransport` protocol, providing
``connect``, ``receive``, ``send``, and ``close`` methods. ``receive`` hands
back raw chunks; splitting them into messages is the framer's job.
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, BinaryIO, Protocol, runtime_checkable

from bitcompass.mcp.errors import TransportClosedError

CHUNK_SIZE = 64 * 1024


@runtime_checkable
class MCPTransport(Protocol):
    """Abstract transport for the server side of MCP."""

    async def connect(self) -> None: ...
    async def receive(self) -> bytes: ...
    async def send(self, data: dict[str, Any]) -> None: ...
    async def close(self) -> None: ...


def encode_line(data: dict[str, Any]) -> bytes:
    """Compact JSON followed by a single newline."""
    return (json.dumps(data, separators=(",", ":"), ensure_ascii=False) + "\n").encode("utf-8")


class StreamTransport:
    """Reads chunks from an :class:`asyncio.StreamReader`, writes lines to a binary stream.

    Usage::

        reader = asyncio.StreamReader()
        reader.feed_data(b'{"id": 1, "method": "tools/list"}\\n')
        reader.feed_eof()
        transport = StreamTransport(reader, io.BytesIO())
    """

    def __init__(self, reader: asyncio.StreamReader | None, writer: BinaryIO | None) -> None:
        self._reader = reader
        self._writer = writer

    async def connect(self) -> None:
        if self._reader is None or self._writer is None:
            msg = "StreamTransport needs a reader and a writer"
            raise TransportClosedError(msg)

    async def receive(self) -> bytes:
        """Return the next chunk, or ``b""`` at end of input."""
        if self._reader is None:
            msg = "Transport not connected"
            raise TransportClosedError(msg)
        return await self._reader.read(CHUNK_SIZE)

    async def send(self, data: dict[str, Any]) -> None:
        """Write one JSON line and flush."""
        if self._writer is None:
            msg = "Transport not connected"
            raise TransportClosedError(msg)
        self._writer.write(encode_line(data))
        self._writer.flush()

    async def close(self) -> None:
        self._reader = None
        self._writer = None


class StdioTransport(StreamTransport):
    """Serves over the process's stdin/stdout."""

    def __init__(self) -> None:
        super().__init__(None, None)

    async def connect(self) -> None:
        """Attach an asyncio reader to stdin."""
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader()
        protocol = asyncio.StreamReaderProtocol(reader)
        await loop.connect_read_pipe(lambda: protocol, sys.stdin)
        self._reader = reader
        self._writer = sys.stdout.buffer
