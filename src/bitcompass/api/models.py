"""Backend record models — rules and activity logs."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

RuleKind = Literal["rule", "solution", "skill", "command"]
TimeFrame = Literal["day", "week", "month"]


class Rule(BaseModel):
    """A row of the ``rules`` table (rules, solutions, skills, commands)."""

    model_config = ConfigDict(extra="ignore")

    id: str
    kind: RuleKind = "rule"
    title: str = ""
    description: str = ""
    body: str = ""
    context: str | None = None
    examples: list[str] = Field(default_factory=list)
    technologies: list[str] = Field(default_factory=list)
    globs: str | None = None
    always_apply: bool = False
    user_id: str | None = None
    author_display_name: str | None = None
    created_at: str = ""
    updated_at: str = ""


class RuleInsert(BaseModel):
    """Payload for creating a rule."""

    kind: RuleKind = "rule"
    title: str
    description: str = ""
    body: str
    context: str | None = None
    examples: list[str] | None = None
    technologies: list[str] | None = None


class RuleUpdate(BaseModel):
    """Partial update; only fields that are set are sent."""

    title: str | None = None
    description: str | None = None
    body: str | None = None
    context: str | None = None
    examples: list[str] | None = None
    technologies: list[str] | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ActivityLogInsert(BaseModel):
    time_frame: TimeFrame
    period_start: str
    period_end: str
    repo_summary: dict[str, Any] = Field(default_factory=dict)
    git_analysis: dict[str, Any] = Field(default_factory=dict)


class ActivityLog(BaseModel):
    """A row of the ``activity_logs`` table."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str | None = None
    time_frame: TimeFrame
    period_start: str
    period_end: str
    repo_summary: dict[str, Any] = Field(default_factory=dict)
    git_analysis: dict[str, Any] = Field(default_factory=dict)
    created_at: str = ""

    @property
    def commit_count(self) -> int:
        count = self.git_analysis.get("commit_count", 0)
        return count if isinstance(count, int) else 0
