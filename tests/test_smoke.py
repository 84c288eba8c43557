"""Smoke test to verify the project scaffolding works."""

from __future__ import annotations


def test_import() -> None:
    import bitcompass

    assert bitcompass.__version__ == "0.1.0"


def test_cli_entrypoint() -> None:
    from bitcompass.cli import main

    assert callable(main)


def test_lazy_import_from_bitcompass() -> None:
    import bitcompass

    assert bitcompass.MCPServer is not None
    assert bitcompass.SupabaseBackend is not None
