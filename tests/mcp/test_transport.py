"""Tests for MCP server transports."""

import asyncio
import io
import json
import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from bitcompass.mcp.errors import TransportClosedError
from bitcompass.mcp.transport import MCPTransport, StdioTransport, StreamTransport, encode_line


class TestMCPTransportProtocol:
    def test_stream_satisfies_protocol(self) -> None:
        transport = StreamTransport(None, None)
        assert isinstance(transport, MCPTransport)

    def test_stdio_satisfies_protocol(self) -> None:
        assert isinstance(StdioTransport(), MCPTransport)


class TestEncodeLine:
    def test_compact_single_line(self) -> None:
        data = encode_line({"jsonrpc": "2.0", "id": 1, "result": {"text": "a\nb"}})
        assert data.endswith(b"\n")
        assert data.count(b"\n") == 1
        assert b", " not in data
        assert json.loads(data) == {"jsonrpc": "2.0", "id": 1, "result": {"text": "a\nb"}}

    def test_non_ascii_kept_as_utf8(self) -> None:
        assert "café".encode() in encode_line({"t": "café"})


class TestStreamTransport:
    async def test_receive_chunks_then_eof(self) -> None:
        reader = asyncio.StreamReader()
        reader.feed_data(b'{"id": 1}\n{"id"')
        reader.feed_eof()
        transport = StreamTransport(reader, io.BytesIO())
        await transport.connect()

        assert await transport.receive() == b'{"id": 1}\n{"id"'
        assert await transport.receive() == b""

    async def test_send_writes_and_flushes(self) -> None:
        writer = MagicMock()
        transport = StreamTransport(asyncio.StreamReader(), writer)
        await transport.send({"jsonrpc": "2.0", "id": 1, "result": {}})

        written = writer.write.call_args[0][0]
        assert json.loads(written) == {"jsonrpc": "2.0", "id": 1, "result": {}}
        writer.flush.assert_called_once()

    async def test_connect_without_streams_raises(self) -> None:
        with pytest.raises(TransportClosedError):
            await StreamTransport(None, None).connect()

    async def test_send_after_close_raises(self) -> None:
        transport = StreamTransport(asyncio.StreamReader(), io.BytesIO())
        await transport.close()
        with pytest.raises(TransportClosedError, match="not connected"):
            await transport.send({"id": 1})

    async def test_receive_after_close_raises(self) -> None:
        transport = StreamTransport(asyncio.StreamReader(), io.BytesIO())
        await transport.close()
        with pytest.raises(TransportClosedError):
            await transport.receive()


class TestStdioTransport:
    async def test_send_before_connect_raises(self) -> None:
        with pytest.raises(TransportClosedError, match="not connected"):
            await StdioTransport().send({"id": 1})

    async def test_connect_attaches_stdin_pipe(self) -> None:
        loop = asyncio.get_running_loop()
        fake_stdout = MagicMock()
        with (
            patch.object(loop, "connect_read_pipe", AsyncMock()) as mock_pipe,
            patch.object(sys, "stdout", fake_stdout),
        ):
            transport = StdioTransport()
            await transport.connect()
            await transport.send({"id": 1})

        mock_pipe.assert_awaited_once()
        assert mock_pipe.await_args.args[1] is sys.stdin
        fake_stdout.buffer.write.assert_called_once_with(b'{"id":1}\n')
