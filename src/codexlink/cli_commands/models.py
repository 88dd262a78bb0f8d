"""``codexlink models`` — list Codex models."""

from __future__ import annotations

import asyncio
import json
import sys

import click

from codexlink.cli_commands._output import console, print_capabilities_table, print_models_table
from codexlink.config import CodexLinkSettings


@click.group()
def models() -> None:
    """List available and known Codex models."""


@models.command("list")
@click.option("--refresh", is_flag=True, help="Bypass the cache and ask the app-server.")
@click.option("--json", "as_json", is_flag=True, help="Print the models as JSON.")
@click.pass_obj
def list_models(settings: CodexLinkSettings, refresh: bool, as_json: bool) -> None:
    """List models available to the authenticated user (cached)."""
    from codexlink.services.app_server import AppServerService
    from codexlink.services.model_cache import ModelCacheService

    app_server = AppServerService(
        cli_path=settings.cli_path, request_timeout=settings.request_timeout
    )
    cache = ModelCacheService(settings.cache_dir, app_server, ttl=settings.model_cache_ttl)

    try:
        found, cached_at = asyncio.run(cache.get_models_with_metadata(force_refresh=refresh))
    except Exception as exc:
        console.print(f"[red]Model listing error:[/red] {exc}")
        console.print("Please install Codex CLI and run 'codex login' to authenticate.")
        sys.exit(1)

    if as_json:
        payload = {"models": [m.model_dump(mode="json") for m in found], "cached_at": cached_at}
        console.print_json(json.dumps(payload))
        return

    if not found:
        console.print("[yellow]No models available.[/yellow]")
        return

    print_models_table(found, cached_at)


@models.command("known")
def known_models() -> None:
    """Show the built-in capability table."""
    from codexlink.registry.registry_data import default_registry

    print_capabilities_table(default_registry())
