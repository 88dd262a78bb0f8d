"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from codexlink.cli_commands.account import account
    from codexlink.cli_commands.auth import auth
    from codexlink.cli_commands.models import models

    cli.add_command(auth)
    cli.add_command(models)
    cli.add_command(account)
