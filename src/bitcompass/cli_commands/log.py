"""``bitcompass log`` — push an activity log for the current repository."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from bitcompass.activity.errors import ActivityLogError, InvalidDateError
from bitcompass.activity.git_analysis import get_repo_root, period_for_custom_dates
from bitcompass.activity.log import (
    build_and_push_activity_log,
    build_and_push_activity_log_with_period,
    parse_log_args,
    time_frame_for_range,
)
from bitcompass.api.client import RestClient
from bitcompass.api.errors import BackendError
from bitcompass.api.models import ActivityLog, TimeFrame
from bitcompass.cli_commands._output import console, err_console, require_login
from bitcompass.config.store import ConfigStore


@click.command()
@click.argument("dates", nargs=-1)
@click.option(
    "--time-frame",
    type=click.Choice(["day", "week", "month"]),
    default=None,
    help="Period ending now; prompted for when no dates are given.",
)
def log(dates: tuple[str, ...], time_frame: TimeFrame | None) -> None:
    """Summarize git activity and push it to your activity logs.

    DATES is empty, START, START END, or START - END (YYYY-MM-DD).
    """
    store = ConfigStore()
    require_login(store)
    cwd = Path.cwd()

    if asyncio.run(get_repo_root(cwd)) is None:
        err_console.print("[red]Not a git repository. Run this command from a project with git.[/red]")
        sys.exit(1)

    client = RestClient(store)
    try:
        parsed = parse_log_args(dates)
        if parsed is None:
            frame = time_frame or click.prompt(
                "Time frame", type=click.Choice(["day", "week", "month"]), default="day"
            )
            with console.status("Analyzing repository..."):
                created = asyncio.run(build_and_push_activity_log(client, frame, cwd))
        else:
            start, end = parsed
            period = period_for_custom_dates(start, end)
            frame = time_frame_for_range(start, end) if end else "day"
            with console.status("Analyzing repository..."):
                created = asyncio.run(
                    build_and_push_activity_log_with_period(client, period, frame, cwd)
                )
    except InvalidDateError as exc:
        err_console.print(f"[red]{exc}[/red]")
        sys.exit(2)
    except (ActivityLogError, BackendError) as exc:
        err_console.print(f"[red]Failed:[/red] {exc}")
        sys.exit(1)

    _print_saved(created)


def _print_saved(created: ActivityLog) -> None:
    console.print("[green]Log saved.[/green]")
    console.print(f"[dim]{created.id}[/dim]")
