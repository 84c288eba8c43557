"""Shared fixtures: an in-memory backend and an isolated config directory."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from bitcompass.api.models import ActivityLog, Rule
from bitcompass.config.store import ConfigStore, StoredCredentials


class FakeBackend:
    """Backend double whose collaborator calls are ``AsyncMock`` objects."""

    def __init__(self, *, logged_in: bool = True) -> None:
        self.logged_in = logged_in
        self.token_checks = 0
        self.search_records = AsyncMock(return_value=[])
        self.get_record_by_id = AsyncMock(return_value=None)
        self.insert_record = AsyncMock()
        self.update_record = AsyncMock()
        self.delete_record = AsyncMock(return_value=None)
        self.list_records = AsyncMock(return_value=[])
        self.write_rule_to_file = AsyncMock()
        self.build_activity_log = AsyncMock()
        self.list_activity_logs = AsyncMock(return_value=[])
        self.get_activity_log_by_id = AsyncMock(return_value=None)

    def has_access_token(self) -> bool:
        self.token_checks += 1
        return self.logged_in


def make_rule(**overrides: Any) -> Rule:
    data: dict[str, Any] = {
        "id": "r-1",
        "kind": "rule",
        "title": "Use pytest fixtures",
        "description": "Prefer fixtures over setup methods",
        "body": "Always use fixtures.",
        "author_display_name": "Ada",
        "created_at": "2025-01-01T00:00:00Z",
        "updated_at": "2025-01-02T00:00:00Z",
    }
    data.update(overrides)
    return Rule.model_validate(data)


def make_log(**overrides: Any) -> ActivityLog:
    data: dict[str, Any] = {
        "id": "log-1",
        "time_frame": "week",
        "period_start": "2025-01-01T00:00:00.000Z",
        "period_end": "2025-01-08T00:00:00.000Z",
        "repo_summary": {"remote_url": "git@example.com:acme/app.git", "branch": "main"},
        "git_analysis": {"commit_count": 4, "commits": []},
        "created_at": "2025-01-08T00:00:01Z",
    }
    data.update(overrides)
    return ActivityLog.model_validate(data)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def logged_out_backend() -> FakeBackend:
    return FakeBackend(logged_in=False)


@pytest.fixture
def rule_factory() -> Any:
    return make_rule


@pytest.fixture
def log_factory() -> Any:
    return make_log


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``BITCOMPASS_CONFIG_DIR`` at a temp dir and clear env fallbacks."""
    directory = tmp_path / "bitcompass-home"
    monkeypatch.setenv("BITCOMPASS_CONFIG_DIR", str(directory))
    for name in (
        "BITCOMPASS_SUPABASE_URL",
        "BITCOMPASS_SUPABASE_ANON_KEY",
        "BITCOMPASS_API_URL",
        "BITCOMPASS_MCP_TOOL_TIMEOUT",
        "BITCOMPASS_OTLP_ENDPOINT",
    ):
        monkeypatch.delenv(name, raising=False)
    return directory


@pytest.fixture
def store(config_dir: Path) -> ConfigStore:
    return ConfigStore()


@pytest.fixture
def logged_in_store(store: ConfigStore) -> ConfigStore:
    store.set_value("supabaseUrl", "https://db.example.com")
    store.set_value("supabaseAnonKey", "anon-key")
    store.save_credentials(
        StoredCredentials.model_validate(
            {"access_token": "tok-123", "user": {"email": "ada@example.com"}}
        )
    )
    return store
