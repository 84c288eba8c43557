"""Filenames for pulled records, derived from their titles."""

from __future__ import annotations

import re

_HEADING = re.compile(r"^#\s*")
_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9-]")
_DASHES = re.compile(r"-+")

_EXTENSIONS = {"rule": ".mdc", "solution": ".md", "skill": ".md", "command": ".md"}


def title_to_slug(title: str | None) -> str:
    """``"# Strava API Authentication Flow"`` → ``"strava-api-authentication-flow"``."""
    trimmed = _HEADING.sub("", (title or "").strip(), count=1)
    if not trimmed:
        return ""
    slug = _WHITESPACE.sub("-", trimmed.lower())
    slug = _DISALLOWED.sub("", slug)
    slug = _DASHES.sub("-", slug)
    return slug.strip("-")


def filename_for(kind: str, title: str | None, record_id: str) -> str:
    """``<kind>-<slug><ext>``, falling back to the id when the slug is empty."""
    slug = title_to_slug(title)
    base = f"{kind}-{slug}" if slug else f"{kind}-{record_id}"
    return base + _EXTENSIONS.get(kind, ".md")


def rule_filename(title: str | None, record_id: str) -> str:
    return filename_for("rule", title, record_id)


def solution_filename(title: str | None, record_id: str) -> str:
    return filename_for("solution", title, record_id)


def skill_filename(title: str | None, record_id: str) -> str:
    return filename_for("skill", title, record_id)


def command_filename(title: str | None, record_id: str) -> str:
    return filename_for("command", title, record_id)
