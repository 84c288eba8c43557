"""Static prompt templates served through ``prompts/list`` and ``prompts/get``."""

from __future__ import annotations

from typing import Any

from bitcompass.mcp.models import PromptDescriptor, text_content

PROMPTS: tuple[PromptDescriptor, ...] = (
    PromptDescriptor(
        name="share_new_rule",
        title="Share a new rule",
        description="Guide to collect and publish a reusable rule",
    ),
    PromptDescriptor(
        name="share_problem_solution",
        title="Share a problem solution",
        description="Guide to collect and publish a problem solution",
    ),
)

_PROMPT_TEXT = {
    "share_new_rule": (
        "You are helping formalize a reusable rule. Collect: title, description, "
        "rule body, and optionally technologies/tags. Ask one question at a time. "
        'Then call post-rules with kind: "rule".'
    ),
    "share_problem_solution": (
        "You are helping share a problem solution. Collect: problem title, "
        "description, and solution text. Ask one question at a time. "
        'Then call post-rules with kind: "solution".'
    ),
}


def list_prompts() -> list[dict[str, Any]]:
    return [prompt.model_dump() for prompt in PROMPTS]


def get_prompt_messages(name: object) -> list[dict[str, Any]] | None:
    """Messages for prompt *name*, or ``None`` when it is not defined."""
    text = _PROMPT_TEXT.get(name) if isinstance(name, str) else None
    if text is None:
        return None
    return [{"role": "user", "content": text_content(text)}]
