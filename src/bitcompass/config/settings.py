"""Runtime settings for the MCP server."""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

TOOL_TIMEOUT_ENV = "BITCOMPASS_MCP_TOOL_TIMEOUT"


class ServerSettings(BaseModel):
    """Identity and limits of the stdio MCP server.

    ``tool_timeout`` is ``None`` by default: a hung collaborator call stalls
    the queue, matching the server's historical behavior.
    """

    name: str = "bitcompass"
    protocol_version: str = "2024-11-05"
    tool_timeout: float | None = Field(default=None, gt=0)

    @classmethod
    def from_env(cls) -> ServerSettings:
        raw = os.environ.get(TOOL_TIMEOUT_ENV, "").strip()
        if not raw:
            return cls()
        try:
            return cls(tool_timeout=float(raw))
        except ValueError:
            # pydantic's ValidationError is a ValueError too.
            logger.warning(
                "Ignoring invalid %s=%r; tool calls will not time out", TOOL_TIMEOUT_ENV, raw
            )
            return cls()
