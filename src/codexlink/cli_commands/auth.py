"""``codexlink auth`` — check Codex CLI authentication."""

from __future__ import annotations

import asyncio
import sys

import click

from codexlink.cli_commands._output import print_auth_result
from codexlink.config import CodexLinkSettings


@click.group()
def auth() -> None:
    """Inspect Codex CLI authentication."""


@auth.command("status")
@click.option("--cli-path", default=None, help="Path to the codex executable.")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.pass_obj
def status(settings: CodexLinkSettings, cli_path: str | None, as_json: bool) -> None:
    """Run `codex login status` and report the outcome.

    Exits with status 1 when the CLI is missing or not authenticated.
    """
    from codexlink.auth.prober import AuthProber

    prober = AuthProber(timeout=settings.probe_timeout)
    result = asyncio.run(prober.check_authentication(cli_path or settings.cli_path))

    print_auth_result(result, as_json=as_json)
    if not result.authenticated:
        sys.exit(1)
