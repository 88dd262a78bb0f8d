"""``codexlink account`` — account state, rate limits and usage."""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

import click

from codexlink.cli_commands._output import (
    console,
    print_account,
    print_rate_limits,
    print_usage,
)
from codexlink.config import CodexLinkSettings

if TYPE_CHECKING:
    from codexlink.services.app_server import AppServerService


@click.group()
def account() -> None:
    """Inspect the Codex account behind the CLI."""


def _app_server(settings: CodexLinkSettings) -> AppServerService:
    from codexlink.services.app_server import AppServerService

    return AppServerService(cli_path=settings.cli_path, request_timeout=settings.request_timeout)


@account.command("show")
@click.option("--json", "as_json", is_flag=True, help="Print the account as JSON.")
@click.pass_obj
def show(settings: CodexLinkSettings, as_json: bool) -> None:
    """Show the result of `account/read`."""
    try:
        state = asyncio.run(_app_server(settings).get_account())
    except Exception as exc:
        console.print(f"[red]Account error:[/red] {exc}")
        sys.exit(1)

    if as_json:
        console.print_json(data=state.to_wire())
        return
    print_account(state)


@account.command("limits")
@click.option("--json", "as_json", is_flag=True, help="Print the rate limits as JSON.")
@click.pass_obj
def limits(settings: CodexLinkSettings, as_json: bool) -> None:
    """Show the result of `account/rateLimits/read`."""
    try:
        snapshot = asyncio.run(_app_server(settings).get_rate_limits())
    except Exception as exc:
        console.print(f"[red]Rate limit error:[/red] {exc}")
        sys.exit(1)

    if as_json:
        console.print_json(data=snapshot.to_wire())
        return
    print_rate_limits(snapshot)


@account.command("usage")
@click.option("--json", "as_json", is_flag=True, help="Print the usage as JSON.")
@click.pass_obj
def usage(settings: CodexLinkSettings, as_json: bool) -> None:
    """Show plan type and usage windows, with auth-file fallback."""
    from codexlink.services.usage import UsageService

    service = UsageService(_app_server(settings), auth_file=settings.auth_file)
    try:
        data = asyncio.run(service.fetch_usage())
    except Exception as exc:
        console.print(f"[red]Usage error:[/red] {exc}")
        sys.exit(1)

    if as_json:
        console.print_json(data.model_dump_json())
        return
    print_usage(data)
