"""RestClient — PostgREST calls against the hosted BitCompass database.

Every call opens a short-lived :class:`httpx.AsyncClient`; credentials are
re-read from the :class:`~bitcompass.config.store.ConfigStore` each time so a
fresh ``bitcompass login`` applies immediately.
"""

from __future__ import annotations

from typing import Any

import httpx

from bitcompass.api.errors import (
    AuthRequiredError,
    BackendError,
    NotConfiguredError,
    NotFoundError,
)
from bitcompass.api.models import (
    ActivityLog,
    ActivityLogInsert,
    Rule,
    RuleInsert,
    RuleKind,
    RuleUpdate,
    TimeFrame,
)
from bitcompass.config.store import ConfigStore

RULES_TABLE = "rules"
ACTIVITY_LOGS_TABLE = "activity_logs"

_AUTH_ERROR_CODES = {"PGRST301", "401"}
_AUTH_ERROR_MARKERS = ("jwt", "row-level security", "permission denied", "not authenticated")


def is_auth_error(code: str, message: str, status_code: int | None = None) -> bool:
    """Return ``True`` when a PostgREST error means "log in again"."""
    if status_code == 401 or code in _AUTH_ERROR_CODES:
        return True
    lowered = message.lower()
    return any(marker in lowered for marker in _AUTH_ERROR_MARKERS)


def _escape_pattern(text: str) -> str:
    """Strip characters that would break a PostgREST ``or=(...)`` filter."""
    return "".join(ch for ch in text if ch not in ",()*")


class RestClient:
    """Typed wrapper over the ``rules`` and ``activity_logs`` tables.

    Usage::

        client = RestClient()
        rules = await client.search_rules("kubernetes", limit=5)
    """

    def __init__(self, store: ConfigStore | None = None, *, timeout: float = 30.0) -> None:
        self._store = store or ConfigStore()
        self._timeout = timeout

    @property
    def store(self) -> ConfigStore:
        return self._store

    # -- rules ---------------------------------------------------------------

    async def fetch_rules(self, kind: RuleKind | None = None, limit: int | None = None) -> list[Rule]:
        params: dict[str, str] = {"select": "*", "order": "created_at.desc"}
        if kind:
            params["kind"] = f"eq.{kind}"
        if limit:
            params["limit"] = str(limit)
        rows = await self._request("GET", RULES_TABLE, params=params)
        return [Rule.model_validate(row) for row in rows]

    async def search_rules(
        self, query: str, *, kind: RuleKind | None = None, limit: int = 20
    ) -> list[Rule]:
        pattern = f"*{_escape_pattern(query)}*"
        params: dict[str, str] = {
            "select": "*",
            "or": (
                f"(title.ilike.{pattern},description.ilike.{pattern},body.ilike.{pattern})"
            ),
            "order": "created_at.desc",
            "limit": str(limit),
        }
        if kind:
            params["kind"] = f"eq.{kind}"
        rows = await self._request("GET", RULES_TABLE, params=params)
        return [Rule.model_validate(row) for row in rows]

    async def get_rule(self, rule_id: str) -> Rule | None:
        rows = await self._request(
            "GET", RULES_TABLE, params={"select": "*", "id": f"eq.{rule_id}", "limit": "1"}
        )
        if not rows:
            return None
        return Rule.model_validate(rows[0])

    async def insert_rule(self, payload: RuleInsert) -> Rule:
        rows = await self._request(
            "POST",
            RULES_TABLE,
            json=payload.model_dump(exclude_none=True),
            prefer="return=representation",
        )
        if not rows:
            raise BackendError("Insert returned no row.")
        return Rule.model_validate(rows[0])

    async def update_rule(self, rule_id: str, updates: RuleUpdate) -> Rule:
        rows = await self._request(
            "PATCH",
            RULES_TABLE,
            params={"id": f"eq.{rule_id}"},
            json=updates.changes(),
            prefer="return=representation",
        )
        if not rows:
            raise NotFoundError("Rule", rule_id)
        return Rule.model_validate(rows[0])

    async def delete_rule(self, rule_id: str) -> None:
        await self._request("DELETE", RULES_TABLE, params={"id": f"eq.{rule_id}"})

    # -- activity logs -------------------------------------------------------

    async def insert_activity_log(self, payload: ActivityLogInsert) -> ActivityLog:
        rows = await self._request(
            "POST",
            ACTIVITY_LOGS_TABLE,
            json=payload.model_dump(),
            prefer="return=representation",
        )
        if not rows:
            raise BackendError("Insert returned no row.")
        return ActivityLog.model_validate(rows[0])

    async def fetch_activity_logs(
        self, *, time_frame: TimeFrame | None = None, limit: int | None = None
    ) -> list[ActivityLog]:
        params: dict[str, str] = {"select": "*", "order": "created_at.desc"}
        if time_frame:
            params["time_frame"] = f"eq.{time_frame}"
        if limit:
            params["limit"] = str(limit)
        rows = await self._request("GET", ACTIVITY_LOGS_TABLE, params=params)
        return [ActivityLog.model_validate(row) for row in rows]

    async def get_activity_log(self, log_id: str) -> ActivityLog | None:
        rows = await self._request(
            "GET",
            ACTIVITY_LOGS_TABLE,
            params={"select": "*", "id": f"eq.{log_id}", "limit": "1"},
        )
        if not rows:
            return None
        return ActivityLog.model_validate(rows[0])

    # -- plumbing --------------------------------------------------------------

    def _connection(self) -> tuple[str, dict[str, str]]:
        """Resolve base URL and auth headers or raise :class:`NotConfiguredError`."""
        url = self._store.get_value("supabaseUrl")
        key = self._store.get_value("supabaseAnonKey")
        if not url or not key:
            raise NotConfiguredError()
        token = self._store.access_token()
        headers = {
            "apikey": key,
            "Authorization": f"Bearer {token or key}",
        }
        return url.rstrip("/"), headers

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        prefer: str | None = None,
    ) -> list[dict[str, Any]]:
        base_url, headers = self._connection()
        if prefer:
            headers["Prefer"] = prefer

        try:
            async with httpx.AsyncClient(
                base_url=base_url, headers=headers, timeout=self._timeout
            ) as client:
                response = await client.request(
                    method, f"/rest/v1/{table}", params=params, json=json
                )
        except httpx.HTTPError as exc:
            raise BackendError(str(exc) or "Request to BitCompass failed.") from exc

        if response.is_error:
            raise self._error_from(response)
        if not response.content:
            return []
        data = response.json()
        if isinstance(data, list):
            return data
        return [data]

    @staticmethod
    def _error_from(response: httpx.Response) -> BackendError:
        code = ""
        message = response.text or f"HTTP {response.status_code}"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            code = str(body.get("code") or "")
            message = str(body.get("message") or message)
        if is_auth_error(code, message, response.status_code):
            return AuthRequiredError()
        return BackendError(message)
