"""BitCompass CLI entrypoint."""

from __future__ import annotations

import click

from bitcompass import __version__


@click.group()
@click.version_option(version=__version__, prog_name="bitcompass")
def main() -> None:
    """BitCompass — shared rules, solutions, and activity logs."""


# Register subcommands
from bitcompass.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
