"""MessageFramer — newline-delimited JSON framing with ordered, single-flight dispatch.

Chunks arrive at arbitrary boundaries. Complete lines are parsed into
:class:`~bitcompass.mcp.models.IncomingMessage` objects and queued; a single
processing pass drains the queue, awaiting each message's handler to
completion before starting the next. Handlers may suspend for as long as they
like: bytes keep being buffered and parsed meanwhile, but message N+1 is not
dispatched until message N has settled.

Unparseable lines are dropped without any output, since there is no request
id to answer. The optional ``on_drop`` hook sees every dropped line.
"""

from __future__ import annotations

import asyncio
import codecs
import json
import logging
from collections import deque
from collections.abc import Awaitable, Callable

from pydantic import ValidationError

from bitcompass.mcp.models import IncomingMessage

logger = logging.getLogger(__name__)

MessageHandler = Callable[[IncomingMessage], Awaitable[None]]
DropHook = Callable[[str, Exception], None]
ErrorHook = Callable[[BaseException, IncomingMessage], None]


class MessageFramer:
    """Turns a chunked byte stream into strictly ordered handler calls.

    Usage::

        framer = MessageFramer(handle)
        framer.feed(b'{"id": 1, "method": "tools/list"}\\n{"id": 2, ')
        framer.feed(b'"method": "prompts/list"}\\n')
        await framer.join()
    """

    def __init__(
        self,
        handler: MessageHandler,
        *,
        on_drop: DropHook | None = None,
        on_error: ErrorHook | None = None,
    ) -> None:
        self._handler = handler
        self._on_drop = on_drop
        self._on_error = on_error
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._queue: deque[IncomingMessage] = deque()
        self._processing = False
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> int:
        """Messages parsed but not yet dispatched."""
        return len(self._queue)

    @property
    def processing(self) -> bool:
        return self._processing

    @property
    def buffered(self) -> str:
        """Carry-over text waiting for its terminating newline."""
        return self._buffer

    def feed(self, chunk: bytes | str) -> None:
        """Append a chunk, enqueue every complete message, and kick processing.

        Must be called from within a running event loop.
        """
        text = self._decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        self._buffer += text
        *lines, self._buffer = self._buffer.split("\n")
        for line in lines:
            message = self._parse(line)
            if message is not None:
                self._queue.append(message)
        self._schedule()

    async def join(self) -> None:
        """Wait until the queue is empty and no pass is in flight."""
        while self._task is not None:
            task = self._task
            await asyncio.shield(task)
            if self._task is task:
                self._task = None

    # -- internals -----------------------------------------------------------

    def _parse(self, line: str) -> IncomingMessage | None:
        stripped = line.strip()
        if not stripped:
            return None
        try:
            data = json.loads(stripped)
            if not isinstance(data, dict):
                msg = f"expected a JSON object, got {type(data).__name__}"
                raise ValueError(msg)
            return IncomingMessage.model_validate(data)
        except (ValueError, ValidationError) as exc:
            self._dropped(stripped, exc)
            return None

    def _dropped(self, line: str, exc: Exception) -> None:
        logger.debug("Dropping malformed line (%s): %.200s", exc, line)
        if self._on_drop is not None:
            try:
                self._on_drop(line, exc)
            except Exception:
                logger.exception("on_drop hook failed")

    def _schedule(self) -> None:
        if self._processing or not self._queue:
            return
        self._processing = True
        self._task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        try:
            while self._queue:
                message = self._queue.popleft()
                try:
                    await self._handler(message)
                except Exception as exc:
                    self._report(exc, message)
        finally:
            self._processing = False

    def _report(self, exc: BaseException, message: IncomingMessage) -> None:
        if self._on_error is None:
            logger.error(
                "Unhandled error while processing %s", message.method, exc_info=exc
            )
            return
        try:
            self._on_error(exc, message)
        except Exception:
            logger.exception("on_error hook failed")
