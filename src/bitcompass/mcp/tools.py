"""Capability handlers — the eleven BitCompass tools exposed over MCP.

Every tool is built by a small factory that closes over the
:class:`~bitcompass.mcp.backend.Backend`; :func:`build_tools` returns them in
``tools/list`` order.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import Field, field_validator

from bitcompass.api.errors import NotFoundError
from bitcompass.api.models import ActivityLog, Rule, RuleInsert, RuleKind, RuleUpdate, TimeFrame
from bitcompass.mcp.backend import Backend
from bitcompass.mcp.registry import ToolDefinition, ToolParameters

SNIPPET_LENGTH = 200
MAX_LIMIT = 100

_TIME_FRAMES = ("day", "week", "month")


def _snippet(body: str) -> str:
    return body[:SNIPPET_LENGTH]


def _rule_summary(rule: Rule) -> dict[str, Any]:
    return {
        "id": rule.id,
        "title": rule.title,
        "kind": rule.kind,
        "author": rule.author_display_name,
        "snippet": _snippet(rule.body),
    }


def _rule_detail(rule: Rule) -> dict[str, Any]:
    return {
        "id": rule.id,
        "title": rule.title,
        "kind": rule.kind,
        "description": rule.description,
        "body": rule.body,
        "context": rule.context,
        "examples": rule.examples,
        "technologies": rule.technologies,
        "author": rule.author_display_name,
        "created_at": rule.created_at,
        "updated_at": rule.updated_at,
    }


def _log_summary(log: ActivityLog) -> dict[str, Any]:
    return {
        "id": log.id,
        "time_frame": log.time_frame,
        "period_start": log.period_start,
        "period_end": log.period_end,
        "commit_count": log.commit_count,
        "created_at": log.created_at,
    }


def _check_time_frame(value: Any) -> Any:
    if value is not None and value not in _TIME_FRAMES:
        msg = "time_frame must be day, week, or month."
        raise ValueError(msg)
    return value


# ---------------------------------------------------------------------------
# Input models
# ---------------------------------------------------------------------------


class SearchRulesInput(ToolParameters):
    query: str = Field(description="Search query")
    kind: RuleKind | None = Field(default=None, description="Restrict results to one kind")
    limit: int = Field(default=20, ge=1, le=MAX_LIMIT)


class SearchSolutionsInput(ToolParameters):
    query: str = Field(description="Search query")
    limit: int = Field(default=20, ge=1, le=MAX_LIMIT)


class PostRuleInput(ToolParameters):
    kind: RuleKind
    title: str
    body: str
    description: str = ""
    context: str | None = None
    examples: list[str] | None = None
    technologies: list[str] | None = None


class CreateActivityLogInput(ToolParameters):
    time_frame: TimeFrame = Field(description="Time period for the activity log")
    repo_path: str | None = Field(
        default=None,
        description=(
            "Path to the git repo (e.g. workspace root). "
            "If omitted, uses current working directory."
        ),
    )

    @field_validator("time_frame", mode="before")
    @classmethod
    def check_time_frame(cls, value: Any) -> Any:
        return _check_time_frame(value)


class RecordIdInput(ToolParameters):
    id: str = Field(description="Record ID")


class ListRulesInput(ToolParameters):
    kind: RuleKind | None = None
    limit: int = Field(default=50, ge=1, le=MAX_LIMIT)


class UpdateRuleInput(ToolParameters):
    id: str = Field(description="Rule ID")
    title: str | None = None
    description: str | None = None
    body: str | None = None
    context: str | None = None
    examples: list[str] | None = None
    technologies: list[str] | None = None

    def updates(self) -> RuleUpdate:
        return RuleUpdate.model_validate(self.model_dump(exclude={"id"}))


class PullRuleInput(ToolParameters):
    id: str = Field(description="Rule or solution ID")
    global_: bool = Field(
        default=False,
        alias="global",
        description="Install into the user-wide editor directory instead of the project",
    )
    output_path: str | None = Field(
        default=None, description="Custom base directory; the kind subfolder is appended"
    )


class ListActivityLogsInput(ToolParameters):
    time_frame: TimeFrame | None = None
    limit: int = Field(default=20, ge=1, le=MAX_LIMIT)

    @field_validator("time_frame", mode="before")
    @classmethod
    def check_time_frame(cls, value: Any) -> Any:
        return _check_time_frame(value)


# ---------------------------------------------------------------------------
# Public tools
# ---------------------------------------------------------------------------


def search_rules_tool(backend: Backend) -> ToolDefinition[SearchRulesInput]:
    async def handler(params: SearchRulesInput) -> dict[str, Any]:
        rules = await backend.search_records(params.query, params.kind, params.limit)
        return {"rules": [_rule_summary(rule) for rule in rules]}

    return ToolDefinition(
        name="search-rules",
        description="Search BitCompass rules by query",
        parameters_model=SearchRulesInput,
        handler=handler,
        failure_message="Search failed.",
    )


def search_solutions_tool(backend: Backend) -> ToolDefinition[SearchSolutionsInput]:
    async def handler(params: SearchSolutionsInput) -> dict[str, Any]:
        rules = await backend.search_records(params.query, "solution", params.limit)
        solutions = []
        for rule in rules:
            summary = _rule_summary(rule)
            del summary["kind"]
            solutions.append(summary)
        return {"solutions": solutions}

    return ToolDefinition(
        name="search-solutions",
        description="Search BitCompass solutions by query",
        parameters_model=SearchSolutionsInput,
        handler=handler,
        failure_message="Search failed.",
    )


def get_rule_tool(backend: Backend) -> ToolDefinition[RecordIdInput]:
    async def handler(params: RecordIdInput) -> dict[str, Any]:
        rule = await backend.get_record_by_id(params.id)
        if rule is None:
            raise NotFoundError("Rule", params.id)
        return {"rule": _rule_detail(rule)}

    return ToolDefinition(
        name="get-rule",
        description="Get a BitCompass rule, solution, skill, or command by ID",
        parameters_model=RecordIdInput,
        handler=handler,
        failure_message="Failed to get rule.",
    )


def list_rules_tool(backend: Backend) -> ToolDefinition[ListRulesInput]:
    async def handler(params: ListRulesInput) -> dict[str, Any]:
        rules = await backend.list_records(params.kind, params.limit)
        return {"rules": [_rule_summary(rule) for rule in rules], "total": len(rules)}

    return ToolDefinition(
        name="list-rules",
        description="List BitCompass rules, newest first",
        parameters_model=ListRulesInput,
        handler=handler,
        failure_message="Failed to list rules.",
    )


# ---------------------------------------------------------------------------
# Authenticated tools
# ---------------------------------------------------------------------------


def post_rules_tool(backend: Backend) -> ToolDefinition[PostRuleInput]:
    async def handler(params: PostRuleInput) -> dict[str, Any]:
        payload = RuleInsert(
            kind=params.kind,
            title=params.title,
            description=params.description,
            body=params.body,
            context=params.context or None,
            examples=params.examples,
            technologies=params.technologies,
        )
        created = await backend.insert_record(payload)
        return {"id": created.id, "title": created.title, "success": True}

    return ToolDefinition(
        name="post-rules",
        description="Publish a new rule or solution to BitCompass",
        parameters_model=PostRuleInput,
        handler=handler,
        requires_auth=True,
        failure_message="Failed to publish rule.",
    )


def update_rule_tool(backend: Backend) -> ToolDefinition[UpdateRuleInput]:
    async def handler(params: UpdateRuleInput) -> dict[str, Any]:
        updates = params.updates()
        if not updates.changes():
            return {"error": "No fields to update."}
        updated = await backend.update_record(params.id, updates)
        return {"id": updated.id, "title": updated.title, "success": True}

    return ToolDefinition(
        name="update-rule",
        description="Update fields of an existing BitCompass rule you own",
        parameters_model=UpdateRuleInput,
        handler=handler,
        requires_auth=True,
        failure_message="Failed to update rule.",
    )


def delete_rule_tool(backend: Backend) -> ToolDefinition[RecordIdInput]:
    async def handler(params: RecordIdInput) -> dict[str, Any]:
        await backend.delete_record(params.id)
        return {"id": params.id, "success": True}

    return ToolDefinition(
        name="delete-rule",
        description="Delete a BitCompass rule you own",
        parameters_model=RecordIdInput,
        handler=handler,
        requires_auth=True,
        failure_message="Failed to delete rule.",
    )


def pull_rule_tool(backend: Backend) -> ToolDefinition[PullRuleInput]:
    async def handler(params: PullRuleInput) -> dict[str, Any]:
        path = await backend.write_rule_to_file(params.id, params.global_, params.output_path)
        return {"success": True, "file_path": str(path)}

    return ToolDefinition(
        name="pull-rule",
        description="Write a BitCompass rule or solution into the project's editor rules folder",
        parameters_model=PullRuleInput,
        handler=handler,
        requires_auth=True,
        failure_message="Failed to pull rule.",
    )


def create_activity_log_tool(backend: Backend) -> ToolDefinition[CreateActivityLogInput]:
    async def handler(params: CreateActivityLogInput) -> dict[str, Any]:
        repo_path = params.repo_path or os.getcwd()
        created = await backend.build_activity_log(params.time_frame, repo_path)
        return {"success": True, "id": created.id}

    return ToolDefinition(
        name="create-activity-log",
        description=(
            "Collect a summary of the repository and git activity for the chosen period, "
            "then push the log to the user's private activity logs. Requires a git "
            "repository; if repo_path is not a git repo, returns an error. Ask the user "
            "which time frame they want: day, week, or month."
        ),
        parameters_model=CreateActivityLogInput,
        handler=handler,
        requires_auth=True,
        failure_message="Failed to create activity log.",
    )


def list_activity_logs_tool(backend: Backend) -> ToolDefinition[ListActivityLogsInput]:
    async def handler(params: ListActivityLogsInput) -> dict[str, Any]:
        logs = await backend.list_activity_logs(params.time_frame, params.limit)
        return {"logs": [_log_summary(log) for log in logs]}

    return ToolDefinition(
        name="list-activity-logs",
        description="List your activity logs, newest first",
        parameters_model=ListActivityLogsInput,
        handler=handler,
        requires_auth=True,
        failure_message="Failed to list activity logs.",
    )


def get_activity_log_tool(backend: Backend) -> ToolDefinition[RecordIdInput]:
    async def handler(params: RecordIdInput) -> dict[str, Any]:
        log = await backend.get_activity_log_by_id(params.id)
        if log is None:
            raise NotFoundError("Activity log", params.id)
        return {"log": log.model_dump()}

    return ToolDefinition(
        name="get-activity-log",
        description="Get one of your activity logs by ID",
        parameters_model=RecordIdInput,
        handler=handler,
        requires_auth=True,
        failure_message="Failed to get activity log.",
    )


def build_tools(backend: Backend) -> list[ToolDefinition[Any]]:
    """All tools bound to *backend*, in ``tools/list`` order."""
    return [
        search_rules_tool(backend),
        search_solutions_tool(backend),
        post_rules_tool(backend),
        create_activity_log_tool(backend),
        get_rule_tool(backend),
        list_rules_tool(backend),
        update_rule_tool(backend),
        delete_rule_tool(backend),
        pull_rule_tool(backend),
        list_activity_logs_tool(backend),
        get_activity_log_tool(backend),
    ]
