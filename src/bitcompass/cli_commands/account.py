"""``bitcompass whoami`` and ``bitcompass logout``."""

from __future__ import annotations

import click

from bitcompass.cli_commands._output import console, require_login
from bitcompass.config.store import ConfigStore


@click.command()
def whoami() -> None:
    """Print the email of the logged-in user."""
    store = ConfigStore()
    require_login(store)
    email = store.current_user_email()
    if email:
        click.echo(email)
    else:
        console.print(
            "[yellow]Logged in (email not stored). Run bitcompass login to refresh.[/yellow]"
        )


@click.command()
def logout() -> None:
    """Forget the stored credentials."""
    ConfigStore().clear_credentials()
    console.print("[green]Logged out.[/green]")
