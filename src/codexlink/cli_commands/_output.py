"""Shared CLI output formatters."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from rich.console import Console
from rich.table import Table

from codexlink.auth.models import AuthCheckResult  # noqa: TC001
from codexlink.protocols.appserver.schema import (  # noqa: TC001
    AccountState,
    RateLimitSnapshot,
    RateLimitWindow,
)
from codexlink.registry.capabilities import ModelCapability  # noqa: TC001
from codexlink.services.model_cache import CodexModel  # noqa: TC001
from codexlink.services.usage import CodexUsage, UsageWindow  # noqa: TC001

console = Console()

_METHOD_LABELS = {
    "api_key_env": "API key (OPENAI_API_KEY)",
    "cli_authenticated": "CLI login",
    "none": "-",
}


def print_auth_result(result: AuthCheckResult, *, as_json: bool = False) -> None:
    if as_json:
        console.print_json(result.model_dump_json())
        return

    if result.authenticated:
        console.print(f"[green]Authenticated[/green] via {_METHOD_LABELS[result.method.value]}")
    else:
        console.print("[yellow]Not authenticated.[/yellow] Run 'codex login' to authenticate.")


def print_models_table(models: Iterable[CodexModel], cached_at: float | None = None) -> None:
    """Pretty-print app-server models as a table."""
    table = Table(title="Codex Models")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Label")
    table.add_column("Tier")
    table.add_column("Thinking")
    table.add_column("Vision")
    table.add_column("Description")

    for model in models:
        label = f"{model.label} (default)" if model.is_default else model.label
        table.add_row(
            model.id,
            label,
            model.tier.value,
            _yes_no(model.has_thinking),
            _yes_no(model.supports_vision),
            _truncate(model.description),
        )

    console.print(table)
    if cached_at is not None:
        console.print(f"  Cached at: {_format_epoch(cached_at)}")


def print_capabilities_table(entries: Iterable[ModelCapability]) -> None:
    """Pretty-print the static capability registry."""
    table = Table(title="Known Codex Models")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Label")
    table.add_column("Thinking")
    table.add_column("Vision")
    table.add_column("Description")

    for entry in entries:
        table.add_row(
            entry.id,
            entry.label,
            _yes_no(entry.has_thinking),
            _yes_no(entry.supports_vision),
            _truncate(entry.description),
        )

    console.print(table)


def print_account(state: AccountState) -> None:
    console.print("\n[bold]Account[/bold]")
    if state.account is None:
        console.print("  (no account)")
    else:
        console.print(f"  Type: {state.account.type.value}")
        console.print(f"  Email: {state.account.email or '-'}")
        console.print(f"  Plan: {state.account.plan_type or '-'}")
    console.print(f"  Requires OpenAI auth: {_yes_no(state.requires_openai_auth)}")


def print_rate_limits(snapshot: RateLimitSnapshot) -> None:
    console.print("\n[bold]Rate Limits[/bold]")
    console.print(f"  Plan: {snapshot.plan_type or '-'}")
    _print_window("Primary", snapshot.primary)
    _print_window("Secondary", snapshot.secondary)


def print_usage(usage: CodexUsage) -> None:
    console.print("\n[bold]Usage[/bold]")
    console.print(f"  Plan: {usage.rate_limits.plan_type.value}")
    _print_window("Primary", usage.rate_limits.primary)
    _print_window("Secondary", usage.rate_limits.secondary)
    console.print(f"  Last updated: {usage.last_updated.isoformat()}")


def _print_window(name: str, window: RateLimitWindow | UsageWindow | None) -> None:
    if window is None:
        console.print(f"  {name}: N/A")
        return
    console.print(
        f"  {name}: {window.used_percent:.0f}% used of {window.window_duration_mins}min window,"
        f" resets {_format_epoch(window.resets_at)}"
    )


def _format_epoch(seconds: float) -> str:
    return datetime.fromtimestamp(seconds, tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
