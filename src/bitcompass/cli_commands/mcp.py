"""``bitcompass mcp`` — run the stdio MCP server for editor integrations."""

from __future__ import annotations

import asyncio
import logging
import sys

import click
from rich.logging import RichHandler

from bitcompass.cli_commands._output import console, err_console
from bitcompass.config.store import ConfigStore
from bitcompass.utils.telemetry import OTLP_ENDPOINT_ENV


def _configure_logging(level: str) -> None:
    # Stdout carries the protocol stream; logs go to stderr only.
    handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=True)
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)


@click.group()
def mcp() -> None:
    """Model Context Protocol server."""


@mcp.command("start")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Log level for stderr diagnostics.",
)
@click.option("--trace", is_flag=True, help="Export OpenTelemetry spans to stderr.")
@click.option(
    "--otlp-endpoint",
    envvar=OTLP_ENDPOINT_ENV,
    default=None,
    help="Export OpenTelemetry spans to this OTLP/gRPC collector.",
)
def start(log_level: str, trace: bool, otlp_endpoint: str | None) -> None:
    """Serve MCP over stdin/stdout until the editor closes the pipe."""
    from bitcompass.mcp.server import start_mcp_server

    _configure_logging(log_level.upper())

    if trace or otlp_endpoint:
        from bitcompass.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(console=trace, otlp_endpoint=otlp_endpoint)
        except ImportError as exc:
            err_console.print(f"[red]Telemetry error:[/red] {exc}")
            sys.exit(1)

    try:
        asyncio.run(start_mcp_server())
    except KeyboardInterrupt:
        pass


@mcp.command("status")
def status() -> None:
    """Show whether the MCP server can authenticate."""
    if ConfigStore().has_access_token():
        console.print("[green]MCP: ready (logged in)[/green]")
    else:
        console.print("[yellow]MCP: not logged in. Run bitcompass login.[/yellow]")
