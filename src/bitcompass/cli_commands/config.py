"""``bitcompass config`` — inspect and edit ``~/.bitcompass/config.json``."""

from __future__ import annotations

import sys

import click

from bitcompass.cli_commands._output import console, err_console, print_config
from bitcompass.config.store import CONFIG_KEYS, ConfigStore


@click.group()
def config() -> None:
    """Show or change the backend configuration."""


@config.command("list")
def list_cmd() -> None:
    """List every config key with its effective value."""
    print_config(ConfigStore())


@config.command("get")
@click.argument("key")
def get(key: str) -> None:
    """Print the value of KEY (empty when unset)."""
    try:
        value = ConfigStore().get_value(key)
    except KeyError:
        err_console.print(f"[red]Unknown key.[/red] Use one of: {', '.join(CONFIG_KEYS)}")
        sys.exit(2)
    click.echo(value or "")


@config.command("set")
@click.argument("key")
@click.argument("value")
def set_cmd(key: str, value: str) -> None:
    """Set KEY to VALUE."""
    try:
        ConfigStore().set_value(key, value)
    except KeyError:
        err_console.print(f"[red]Unknown key.[/red] Use one of: {', '.join(CONFIG_KEYS)}")
        sys.exit(2)
    console.print(f"[green]Updated[/green] {key}")
