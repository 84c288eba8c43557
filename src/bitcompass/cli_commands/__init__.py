"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from bitcompass.cli_commands.account import logout, whoami
    from bitcompass.cli_commands.config import config
    from bitcompass.cli_commands.log import log
    from bitcompass.cli_commands.mcp import mcp
    from bitcompass.cli_commands.rules import rules

    cli.add_command(mcp)
    cli.add_command(config)
    cli.add_command(rules)
    cli.add_command(log)
    cli.add_command(whoami)
    cli.add_command(logout)
