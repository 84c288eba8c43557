"""Central cache of pulled records under ``<config dir>/cache/rules``."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from bitcompass.api.models import Rule
from bitcompass.config.store import ConfigStore
from bitcompass.rules.mdc_format import build_content
from bitcompass.rules.slug import filename_for

logger = logging.getLogger(__name__)


def cache_dir(store: ConfigStore) -> Path:
    directory = store.ensure_dir() / "cache" / "rules"
    directory.mkdir(mode=0o755, parents=True, exist_ok=True)
    return directory


def cached_rule_path(store: ConfigStore, rule: Rule) -> Path:
    return cache_dir(store) / f"{rule.id}-{filename_for(rule.kind, rule.title, rule.id)}"


def is_cache_outdated(path: Path, rule: Rule) -> bool:
    """``True`` when the record changed after the cached file was written."""
    try:
        cached_at = path.stat().st_mtime
    except OSError:
        return True
    if not rule.updated_at:
        return False
    try:
        updated = datetime.fromisoformat(rule.updated_at.replace("Z", "+00:00"))
    except ValueError:
        return True
    return updated.timestamp() > cached_at


def ensure_rule_cached(store: ConfigStore, rule: Rule) -> Path:
    """Write *rule* to the cache unless an up-to-date copy exists."""
    path = cached_rule_path(store, rule)
    if not path.exists() or is_cache_outdated(path, rule):
        logger.debug("Caching %s at %s", rule.id, path)
        path.write_text(build_content(rule), encoding="utf-8")
    return path
