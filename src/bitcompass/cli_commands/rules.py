"""``bitcompass rules`` — search, list, and pull shared rules."""

from __future__ import annotations

import asyncio
import sys

import click

from bitcompass.api.client import RestClient
from bitcompass.api.errors import BackendError, NotFoundError
from bitcompass.cli_commands._output import (
    console,
    err_console,
    print_rules_table,
    require_login,
)
from bitcompass.config.store import ConfigStore

_KINDS = click.Choice(["rule", "solution", "skill", "command"])


@click.group()
def rules() -> None:
    """Work with BitCompass rules."""


@rules.command("search")
@click.argument("query")
@click.option("--kind", type=_KINDS, default="rule", show_default=True)
@click.option("--limit", type=click.IntRange(1, 100), default=20, show_default=True)
def search(query: str, kind: str, limit: int) -> None:
    """Search rules whose title, description, or body match QUERY."""
    store = ConfigStore()
    require_login(store)
    client = RestClient(store)

    try:
        found = asyncio.run(client.search_rules(query, kind=kind, limit=limit))  # type: ignore[arg-type]
    except BackendError as exc:
        err_console.print(f"[red]Search error:[/red] {exc}")
        sys.exit(1)

    if not found:
        console.print("[yellow]No rules found.[/yellow]")
        return

    print_rules_table(found, title=f"Results for {query!r}")


@rules.command("list")
@click.option("--kind", type=_KINDS, default="rule", show_default=True)
@click.option("--limit", type=click.IntRange(1, 100), default=None)
def list_cmd(kind: str, limit: int | None) -> None:
    """List rules, newest first."""
    store = ConfigStore()
    require_login(store)
    client = RestClient(store)

    try:
        found = asyncio.run(client.fetch_rules(kind, limit))  # type: ignore[arg-type]
    except BackendError as exc:
        err_console.print(f"[red]Error loading rules:[/red] {exc}")
        sys.exit(1)

    if not found:
        console.print("[yellow]No rules yet.[/yellow]")
        return

    print_rules_table(found, show_kind=False)


@rules.command("pull")
@click.argument("rule_id")
@click.option("--global", "global_", is_flag=True, help="Install for all projects.")
@click.option("--copy", is_flag=True, help="Write a plain file instead of a symlink.")
@click.option("--output-path", default=None, help="Custom base directory.")
def pull(rule_id: str, global_: bool, copy: bool, output_path: str | None) -> None:
    """Write RULE_ID into the editor rules folder."""
    from bitcompass.rules.file_ops import pull_rule_to_file

    store = ConfigStore()
    require_login(store)
    client = RestClient(store)

    try:
        path = asyncio.run(
            pull_rule_to_file(
                client,
                rule_id,
                global_=global_,
                output_path=output_path,
                use_symlink=not copy,
            )
        )
    except NotFoundError as exc:
        err_console.print(f"[red]{exc}[/red]")
        sys.exit(2)
    except BackendError as exc:
        err_console.print(f"[red]Failed to pull rule:[/red] {exc}")
        sys.exit(1)

    console.print("[green]Pulled rule[/green]")
    console.print(f"[dim]{path}[/dim]")
    if copy:
        console.print("[dim]Copied as file (not a symlink)[/dim]")
    else:
        console.print("[dim]Created symbolic link to cached rule[/dim]")
    if global_:
        console.print("[dim]Installed globally for all projects[/dim]")
