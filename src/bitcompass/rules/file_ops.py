"""Materialize a rule, solution, skill, or command into the project tree."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from bitcompass.api.client import RestClient
from bitcompass.api.errors import NotFoundError
from bitcompass.api.models import Rule
from bitcompass.config.project import (
    KIND_SUBFOLDERS,
    get_project_config,
    global_output_dir_for_kind,
    output_dir_for_kind,
)
from bitcompass.rules.cache import ensure_rule_cached
from bitcompass.rules.mdc_format import build_content
from bitcompass.rules.slug import filename_for

logger = logging.getLogger(__name__)

# Kinds that are always written as standalone markdown, never linked.
_COPY_ONLY_KINDS = frozenset({"command", "solution"})


def resolve_output_dir(
    rule: Rule,
    *,
    global_: bool = False,
    output_path: str | None = None,
    cwd: Path | None = None,
) -> Path:
    """Pick the directory a record is pulled into.

    Precedence: explicit ``output_path`` (used as base, kind subfolder
    appended), then the user-wide directory when ``global_``, then the
    project config.
    """
    if output_path:
        base = Path(output_path)
        if not base.is_absolute():
            base = (cwd or Path.cwd()) / base
        return base / KIND_SUBFOLDERS[rule.kind]
    if global_:
        return global_output_dir_for_kind(rule.kind)
    config = get_project_config(cwd, warn_if_missing=True)
    return output_dir_for_kind(config, rule.kind, cwd)


async def pull_rule_to_file(
    client: RestClient,
    rule_id: str,
    *,
    global_: bool = False,
    output_path: str | None = None,
    use_symlink: bool = False,
    cwd: Path | None = None,
) -> Path:
    """Fetch *rule_id* and write (or link) it; return the resulting path.

    Raises:
        NotFoundError: When no record has that id.
        BackendError: On any backend failure.
    """
    rule = await client.get_rule(rule_id)
    if rule is None:
        raise NotFoundError("Rule or solution", rule_id)

    out_dir = resolve_output_dir(rule, global_=global_, output_path=output_path, cwd=cwd)
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / filename_for(rule.kind, rule.title, rule.id)

    if target.is_symlink() or target.is_file():
        target.unlink()

    if use_symlink and rule.kind not in _COPY_ONLY_KINDS:
        cached = ensure_rule_cached(client.store, rule)
        _link(cached, target)
    else:
        target.write_text(build_content(rule), encoding="utf-8")

    logger.info("Pulled %s to %s", rule.id, target)
    return target


def _link(source: Path, target: Path) -> None:
    try:
        relative = os.path.relpath(source, target.parent)
    except ValueError:
        # Different drives on Windows.
        relative = str(source)
    try:
        target.symlink_to(relative)
    except FileNotFoundError:
        target.symlink_to(source)
