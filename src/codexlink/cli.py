"""codexlink CLI entrypoint."""

from __future__ import annotations

import click

from codexlink import __version__


@click.group()
@click.version_option(version=__version__, prog_name="codexlink")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Settings YAML (defaults to $CODEXLINK_CONFIG).",
)
@click.pass_context
def main(ctx: click.Context, config_path: str | None) -> None:
    """codexlink — inspect Codex CLI authentication, models and usage."""
    from codexlink.cli_commands._output import console
    from codexlink.config import ConfigError, load_settings

    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        ctx.exit(2)

    if settings.telemetry.enabled:
        from codexlink.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(settings.telemetry)
        except ImportError as exc:
            console.print(f"[yellow]Telemetry disabled:[/yellow] {exc}")

    ctx.obj = settings


# Register subcommands
from codexlink.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
