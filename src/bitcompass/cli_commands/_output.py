"""Shared CLI output formatters."""

from __future__ import annotations

import sys

from rich.console import Console
from rich.table import Table

from bitcompass.api.models import Rule  # noqa: TC001
from bitcompass.config.store import CONFIG_KEYS, ConfigStore

console = Console()
err_console = Console(stderr=True)

NOT_LOGGED_IN = "Not logged in. Run bitcompass login."


def require_login(store: ConfigStore) -> None:
    """Exit with status 1 unless a token is stored."""
    if not store.has_access_token():
        err_console.print(f"[red]{NOT_LOGGED_IN}[/red]")
        sys.exit(1)


def print_rules_table(rules: list[Rule], *, title: str = "Rules", show_kind: bool = True) -> None:
    """Pretty-print rules as a table."""
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    if show_kind:
        table.add_column("Kind")
    table.add_column("Author")

    for rule in rules:
        row = [rule.id, _truncate(rule.title)]
        if show_kind:
            row.append(rule.kind)
        row.append(rule.author_display_name or "-")
        table.add_row(*row)

    console.print(table)


def print_config(store: ConfigStore) -> None:
    console.print(f"[dim]Config dir:[/dim] {store.directory}\n")
    for key in CONFIG_KEYS:
        value = store.get_value(key) or "(not set)"
        console.print(f"  {key}: {_truncate(value, 40)}")


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
