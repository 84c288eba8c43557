"""Backend protocol — the collaborators the capability handlers depend on."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from bitcompass.api.models import (
    ActivityLog,
    Rule,
    RuleInsert,
    RuleKind,
    RuleUpdate,
    TimeFrame,
)


@runtime_checkable
class Backend(Protocol):
    """Data store, credential store, and filesystem as seen by the MCP tools.

    ``has_access_token`` is re-evaluated on every call; implementations must
    not cache it.
    """

    def has_access_token(self) -> bool: ...

    async def search_records(
        self, query: str, kind: RuleKind | None = None, limit: int = 20
    ) -> list[Rule]: ...

    async def get_record_by_id(self, record_id: str) -> Rule | None: ...

    async def insert_record(self, payload: RuleInsert) -> Rule: ...

    async def update_record(self, record_id: str, updates: RuleUpdate) -> Rule: ...

    async def delete_record(self, record_id: str) -> None: ...

    async def list_records(
        self, kind: RuleKind | None = None, limit: int | None = None
    ) -> list[Rule]: ...

    async def write_rule_to_file(
        self, record_id: str, global_: bool = False, output_path: str | None = None
    ) -> Path: ...

    async def build_activity_log(self, time_frame: TimeFrame, cwd: str) -> ActivityLog: ...

    async def list_activity_logs(
        self, time_frame: TimeFrame | None = None, limit: int | None = None
    ) -> list[ActivityLog]: ...

    async def get_activity_log_by_id(self, log_id: str) -> ActivityLog | None: ...
