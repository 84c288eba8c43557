"""SupabaseBackend — the default collaborator set for the MCP server.

Composes the credential store, the REST client, rule file writing and
activity-log collection behind the :class:`~bitcompass.mcp.backend.Backend`
protocol.
"""

from __future__ import annotations

from pathlib import Path

from bitcompass.activity.log import build_and_push_activity_log
from bitcompass.api.client import RestClient
from bitcompass.api.models import (
    ActivityLog,
    Rule,
    RuleInsert,
    RuleKind,
    RuleUpdate,
    TimeFrame,
)
from bitcompass.config.store import ConfigStore
from bitcompass.rules.file_ops import pull_rule_to_file


class SupabaseBackend:
    """Usage::

    backend = SupabaseBackend()
    server = MCPServer(backend)
    """

    def __init__(
        self,
        store: ConfigStore | None = None,
        client: RestClient | None = None,
        *,
        cwd: Path | None = None,
    ) -> None:
        self._store = store or (client.store if client is not None else ConfigStore())
        self._client = client or RestClient(self._store)
        self._cwd = cwd

    @property
    def client(self) -> RestClient:
        return self._client

    def has_access_token(self) -> bool:
        return self._store.has_access_token()

    async def search_records(
        self, query: str, kind: RuleKind | None = None, limit: int = 20
    ) -> list[Rule]:
        return await self._client.search_rules(query, kind=kind, limit=limit)

    async def get_record_by_id(self, record_id: str) -> Rule | None:
        return await self._client.get_rule(record_id)

    async def insert_record(self, payload: RuleInsert) -> Rule:
        return await self._client.insert_rule(payload)

    async def update_record(self, record_id: str, updates: RuleUpdate) -> Rule:
        return await self._client.update_rule(record_id, updates)

    async def delete_record(self, record_id: str) -> None:
        await self._client.delete_rule(record_id)

    async def list_records(
        self, kind: RuleKind | None = None, limit: int | None = None
    ) -> list[Rule]:
        return await self._client.fetch_rules(kind, limit)

    async def write_rule_to_file(
        self, record_id: str, global_: bool = False, output_path: str | None = None
    ) -> Path:
        return await pull_rule_to_file(
            self._client, record_id, global_=global_, output_path=output_path, cwd=self._cwd
        )

    async def build_activity_log(self, time_frame: TimeFrame, cwd: str) -> ActivityLog:
        return await build_and_push_activity_log(self._client, time_frame, cwd)

    async def list_activity_logs(
        self, time_frame: TimeFrame | None = None, limit: int | None = None
    ) -> list[ActivityLog]:
        return await self._client.fetch_activity_logs(time_frame=time_frame, limit=limit)

    async def get_activity_log_by_id(self, log_id: str) -> ActivityLog | None:
        return await self._client.get_activity_log(log_id)
