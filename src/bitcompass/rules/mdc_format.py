"""Rendering of pulled records into editor files.

Rules become Cursor ``.mdc`` files: YAML front matter (``description``,
optional ``globs``, ``alwaysApply``) followed by the rule body. Solutions,
skills, and commands are plain markdown.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import yaml

from bitcompass.api.models import Rule

FRONTMATTER_DELIM = "---"


@dataclass
class ParsedMdc:
    description: str
    always_apply: bool
    body: str
    globs: str | None = None


def build_rule_mdc_content(rule: Rule) -> str:
    front: dict[str, Any] = {"description": rule.description or ""}
    if rule.globs and rule.globs.strip():
        front["globs"] = rule.globs.strip()
    front["alwaysApply"] = rule.always_apply is True
    header = yaml.safe_dump(
        front, sort_keys=False, allow_unicode=True, width=float("inf")
    )
    return f"{FRONTMATTER_DELIM}\n{header}{FRONTMATTER_DELIM}\n\n{rule.body.rstrip()}\n"


def parse_rule_mdc_content(raw: str) -> ParsedMdc | None:
    """Parse ``.mdc`` content; ``None`` when there is no front matter."""
    trimmed = raw.lstrip()
    if not trimmed.startswith(FRONTMATTER_DELIM):
        return None
    rest = trimmed[len(FRONTMATTER_DELIM) :]
    end = rest.find("\n" + FRONTMATTER_DELIM)
    if end == -1:
        return None
    block = rest[:end]
    body = rest[end + len(FRONTMATTER_DELIM) + 1 :].lstrip()
    try:
        data = yaml.safe_load(block) or {}
    except yaml.YAMLError:
        return None
    if not isinstance(data, dict):
        return None

    always_apply = data.get("alwaysApply", False)
    if isinstance(always_apply, str):
        always_apply = always_apply.lower() in ("true", "1")
    globs = data.get("globs")
    return ParsedMdc(
        description=str(data.get("description") or ""),
        always_apply=bool(always_apply),
        body=body,
        globs=str(globs) if globs is not None else None,
    )


def build_solution_content(rule: Rule) -> str:
    return f"# {rule.title}\n\n{rule.description}\n\n## Solution\n\n{rule.body.rstrip()}\n"


def build_markdown_content(rule: Rule) -> str:
    """Plain markdown used for skills and commands."""
    return f"# {rule.title}\n\n{rule.description}\n\n{rule.body.rstrip()}\n"


def build_content(rule: Rule) -> str:
    if rule.kind == "rule":
        return build_rule_mdc_content(rule)
    if rule.kind == "solution":
        return build_solution_content(rule)
    return build_markdown_content(rule)
