"""Tests for ``bitcompass config`` CLI commands."""

from __future__ import annotations

from click.testing import CliRunner

from bitcompass.cli import main
from bitcompass.config.store import ConfigStore


class TestConfigSetGet:
    def test_set_then_get(self, store: ConfigStore) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["config", "set", "apiUrl", "https://api.example.com"])
        assert result.exit_code == 0
        assert "Updated" in result.output

        result = runner.invoke(main, ["config", "get", "apiUrl"])
        assert result.exit_code == 0
        assert result.output.strip() == "https://api.example.com"
        assert store.get_value("apiUrl") == "https://api.example.com"

    def test_get_unset(self, store: ConfigStore) -> None:
        result = CliRunner().invoke(main, ["config", "get", "supabaseUrl"])
        assert result.exit_code == 0
        assert result.output.strip() == ""

    def test_unknown_key(self, store: ConfigStore) -> None:
        result = CliRunner().invoke(main, ["config", "set", "colour", "blue"])
        assert result.exit_code == 2
        assert "Unknown key" in result.output

        result = CliRunner().invoke(main, ["config", "get", "colour"])
        assert result.exit_code == 2


class TestConfigList:
    def test_lists_all_keys(self, logged_in_store: ConfigStore) -> None:
        result = CliRunner().invoke(main, ["config", "list"])
        assert result.exit_code == 0
        assert "supabaseUrl: https://db.example.com" in result.output
        assert "apiUrl: (not set)" in result.output
