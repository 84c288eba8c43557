"""Tests for the BitCompass capability handlers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest

from bitcompass.api.errors import AUTH_REQUIRED_MSG, BackendError, NotFoundError
from bitcompass.api.models import RuleInsert, RuleUpdate
from bitcompass.mcp.registry import ToolRegistry
from bitcompass.mcp.tools import build_tools

EXPECTED_TOOLS = [
    "search-rules",
    "search-solutions",
    "post-rules",
    "create-activity-log",
    "get-rule",
    "list-rules",
    "update-rule",
    "delete-rule",
    "pull-rule",
    "list-activity-logs",
    "get-activity-log",
]

AUTH_TOOLS = {
    "post-rules": {"kind": "rule", "title": "t", "body": "b"},
    "create-activity-log": {"time_frame": "day"},
    "update-rule": {"id": "r-1", "title": "t"},
    "delete-rule": {"id": "r-1"},
    "pull-rule": {"id": "r-1"},
    "list-activity-logs": {},
    "get-activity-log": {"id": "log-1"},
}


def _registry(backend: Any) -> ToolRegistry:
    return ToolRegistry(build_tools(backend), has_access_token=backend.has_access_token)


async def _call(backend: Any, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    registry = _registry(backend)
    tool = registry.get(name)
    assert tool is not None
    return await registry.invoke(tool, arguments)


class TestToolSet:
    def test_all_tools_registered_in_order(self, backend: Any) -> None:
        assert [d["name"] for d in _registry(backend).descriptors()] == EXPECTED_TOOLS

    def test_listing_does_not_touch_backend(self, backend: Any) -> None:
        _registry(backend).descriptors()
        assert backend.token_checks == 0
        backend.search_records.assert_not_called()

    def test_pull_rule_schema_uses_global_alias(self, backend: Any) -> None:
        descriptor = _registry(backend).tools["pull-rule"].descriptor()
        assert "global" in descriptor["inputSchema"]["properties"]
        assert "global_" not in descriptor["inputSchema"]["properties"]

    def test_search_rules_schema(self, backend: Any) -> None:
        schema = _registry(backend).tools["search-rules"].descriptor()["inputSchema"]
        assert schema["required"] == ["query"]
        assert schema["properties"]["limit"]["default"] == 20


class TestSearchRules:
    async def test_returns_summaries(self, backend: Any, rule_factory: Any) -> None:
        backend.search_records.return_value = [
            rule_factory(id="r-1", body="x" * 500),
            rule_factory(id="r-2", author_display_name=None),
            rule_factory(id="r-3", kind="skill"),
        ]
        result = await _call(backend, "search-rules", {"query": "kubernetes", "limit": 5})

        backend.search_records.assert_awaited_once_with("kubernetes", None, 5)
        assert len(result["rules"]) == 3
        for entry in result["rules"]:
            assert set(entry) == {"id", "title", "kind", "author", "snippet"}
            assert len(entry["snippet"]) <= 200
        assert result["rules"][0]["snippet"] == "x" * 200
        assert result["rules"][1]["author"] is None
        assert result["rules"][2]["kind"] == "skill"

    async def test_default_limit(self, backend: Any) -> None:
        await _call(backend, "search-rules", {"query": "q"})
        backend.search_records.assert_awaited_once_with("q", None, 20)

    async def test_kind_filter(self, backend: Any) -> None:
        await _call(backend, "search-rules", {"query": "q", "kind": "solution"})
        backend.search_records.assert_awaited_once_with("q", "solution", 20)

    async def test_does_not_require_auth(self, logged_out_backend: Any) -> None:
        result = await _call(logged_out_backend, "search-rules", {"query": "q"})
        assert result == {"rules": []}

    @pytest.mark.parametrize("limit", [0, 101, "5"])
    async def test_bad_limit_rejected(self, backend: Any, limit: Any) -> None:
        result = await _call(backend, "search-rules", {"query": "q", "limit": limit})
        assert result["error"].startswith("Invalid arguments for search-rules:")
        backend.search_records.assert_not_awaited()

    async def test_unknown_kind_rejected(self, backend: Any) -> None:
        result = await _call(backend, "search-rules", {"query": "q", "kind": "recipe"})
        assert "error" in result

    async def test_backend_failure(self, backend: Any) -> None:
        backend.search_records.side_effect = BackendError("")
        result = await _call(backend, "search-rules", {"query": "q"})
        assert result == {"error": "Search failed."}


class TestSearchSolutions:
    async def test_returns_solutions_without_kind(self, backend: Any, rule_factory: Any) -> None:
        backend.search_records.return_value = [rule_factory(kind="solution")]
        result = await _call(backend, "search-solutions", {"query": "oauth"})
        backend.search_records.assert_awaited_once_with("oauth", "solution", 20)
        assert result["solutions"] == [
            {
                "id": "r-1",
                "title": "Use pytest fixtures",
                "author": "Ada",
                "snippet": "Always use fixtures.",
            }
        ]


class TestAuthGatedTools:
    @pytest.mark.parametrize(("name", "arguments"), list(AUTH_TOOLS.items()))
    async def test_requires_token(
        self, logged_out_backend: Any, name: str, arguments: dict[str, Any]
    ) -> None:
        result = await _call(logged_out_backend, name, arguments)
        assert result == {"error": AUTH_REQUIRED_MSG}
        for attr in (
            "insert_record",
            "update_record",
            "delete_record",
            "write_rule_to_file",
            "build_activity_log",
            "list_activity_logs",
            "get_activity_log_by_id",
        ):
            getattr(logged_out_backend, attr).assert_not_called()


class TestPostRules:
    async def test_publishes(self, backend: Any, rule_factory: Any) -> None:
        backend.insert_record.return_value = rule_factory(id="new-1", title="Pin deps")
        result = await _call(
            backend,
            "post-rules",
            {
                "kind": "rule",
                "title": "Pin deps",
                "body": "Pin everything.",
                "technologies": ["python"],
                "context": "",
            },
        )
        assert result == {"id": "new-1", "title": "Pin deps", "success": True}
        payload = backend.insert_record.await_args.args[0]
        assert isinstance(payload, RuleInsert)
        assert payload.description == ""
        assert payload.context is None
        assert payload.technologies == ["python"]
        assert payload.examples is None

    async def test_missing_body_rejected(self, backend: Any) -> None:
        result = await _call(backend, "post-rules", {"kind": "rule", "title": "t"})
        assert result["error"].startswith("Invalid arguments for post-rules:")
        backend.insert_record.assert_not_awaited()

    async def test_examples_must_be_strings(self, backend: Any) -> None:
        result = await _call(
            backend, "post-rules", {"kind": "rule", "title": "t", "body": "b", "examples": [1]}
        )
        assert "error" in result

    async def test_insert_failure(self, backend: Any) -> None:
        backend.insert_record.side_effect = BackendError("duplicate key")
        result = await _call(backend, "post-rules", {"kind": "solution", "title": "t", "body": "b"})
        assert result == {"error": "duplicate key"}


class TestCreateActivityLog:
    async def test_uses_repo_path(self, backend: Any, log_factory: Any) -> None:
        backend.build_activity_log.return_value = log_factory(id="log-9")
        result = await _call(
            backend, "create-activity-log", {"time_frame": "week", "repo_path": "/work/app"}
        )
        assert result == {"success": True, "id": "log-9"}
        backend.build_activity_log.assert_awaited_once_with("week", "/work/app")

    async def test_defaults_to_cwd(self, backend: Any, log_factory: Any) -> None:
        backend.build_activity_log.return_value = log_factory()
        await _call(backend, "create-activity-log", {"time_frame": "day"})
        backend.build_activity_log.assert_awaited_once_with("day", os.getcwd())

    async def test_invalid_time_frame(self, backend: Any) -> None:
        result = await _call(backend, "create-activity-log", {"time_frame": "year"})
        assert "time_frame must be day, week, or month." in result["error"]
        backend.build_activity_log.assert_not_awaited()


class TestGetRule:
    async def test_returns_full_record(self, backend: Any, rule_factory: Any) -> None:
        backend.get_record_by_id.return_value = rule_factory(examples=["e1"], context="ctx")
        result = await _call(backend, "get-rule", {"id": "r-1"})
        assert result["rule"] == {
            "id": "r-1",
            "title": "Use pytest fixtures",
            "kind": "rule",
            "description": "Prefer fixtures over setup methods",
            "body": "Always use fixtures.",
            "context": "ctx",
            "examples": ["e1"],
            "technologies": [],
            "author": "Ada",
            "created_at": "2025-01-01T00:00:00Z",
            "updated_at": "2025-01-02T00:00:00Z",
        }

    async def test_not_found(self, backend: Any) -> None:
        result = await _call(backend, "get-rule", {"id": "nope"})
        assert result == {"error": "Rule with ID nope not found."}


class TestListRules:
    async def test_lists_with_total(self, backend: Any, rule_factory: Any) -> None:
        backend.list_records.return_value = [rule_factory(id="a"), rule_factory(id="b")]
        result = await _call(backend, "list-rules", {"kind": "rule"})
        backend.list_records.assert_awaited_once_with("rule", 50)
        assert result["total"] == 2
        assert [r["id"] for r in result["rules"]] == ["a", "b"]


class TestUpdateRule:
    async def test_updates_given_fields(self, backend: Any, rule_factory: Any) -> None:
        backend.update_record.return_value = rule_factory(title="New title")
        result = await _call(backend, "update-rule", {"id": "r-1", "title": "New title"})
        assert result == {"id": "r-1", "title": "New title", "success": True}
        rule_id, updates = backend.update_record.await_args.args
        assert rule_id == "r-1"
        assert isinstance(updates, RuleUpdate)
        assert updates.changes() == {"title": "New title"}

    async def test_no_fields(self, backend: Any) -> None:
        result = await _call(backend, "update-rule", {"id": "r-1"})
        assert result == {"error": "No fields to update."}
        backend.update_record.assert_not_awaited()

    async def test_not_found(self, backend: Any) -> None:
        backend.update_record.side_effect = NotFoundError("Rule", "r-404")
        result = await _call(backend, "update-rule", {"id": "r-404", "body": "b"})
        assert result == {"error": "Rule with ID r-404 not found."}


class TestDeleteRule:
    async def test_deletes(self, backend: Any) -> None:
        result = await _call(backend, "delete-rule", {"id": "r-1"})
        assert result == {"id": "r-1", "success": True}
        backend.delete_record.assert_awaited_once_with("r-1")


class TestPullRule:
    async def test_writes_file(self, backend: Any) -> None:
        backend.write_rule_to_file.return_value = Path("/proj/.cursor/rules/rule-x.mdc")
        result = await _call(backend, "pull-rule", {"id": "r-1"})
        assert result == {"success": True, "file_path": "/proj/.cursor/rules/rule-x.mdc"}
        backend.write_rule_to_file.assert_awaited_once_with("r-1", False, None)

    async def test_global_alias_and_output_path(self, backend: Any) -> None:
        backend.write_rule_to_file.return_value = Path("/out/rules/rule-x.mdc")
        await _call(backend, "pull-rule", {"id": "r-1", "global": True, "output_path": "/out"})
        backend.write_rule_to_file.assert_awaited_once_with("r-1", True, "/out")


class TestActivityLogs:
    async def test_list_summaries(self, backend: Any, log_factory: Any) -> None:
        backend.list_activity_logs.return_value = [log_factory()]
        result = await _call(backend, "list-activity-logs", {"time_frame": "week", "limit": 5})
        backend.list_activity_logs.assert_awaited_once_with("week", 5)
        assert result["logs"] == [
            {
                "id": "log-1",
                "time_frame": "week",
                "period_start": "2025-01-01T00:00:00.000Z",
                "period_end": "2025-01-08T00:00:00.000Z",
                "commit_count": 4,
                "created_at": "2025-01-08T00:00:01Z",
            }
        ]

    async def test_get_full_record(self, backend: Any, log_factory: Any) -> None:
        backend.get_activity_log_by_id.return_value = log_factory()
        result = await _call(backend, "get-activity-log", {"id": "log-1"})
        assert result["log"]["id"] == "log-1"
        assert result["log"]["repo_summary"]["branch"] == "main"

    async def test_get_not_found(self, backend: Any) -> None:
        result = await _call(backend, "get-activity-log", {"id": "missing"})
        assert result == {"error": "Activity log with ID missing not found."}
