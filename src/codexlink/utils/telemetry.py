"""OpenTelemetry tracing for codexlink.

Probes and RPC calls open spans through :func:`get_tracer`, which is backed
by the OpenTelemetry API alone. Until :func:`configure_telemetry` installs
an SDK provider every span is a no-op, so instrumented code never has to
check whether tracing is on.

Span names:

- ``codexlink.auth.probe``: one ``codex login status`` probe.
- ``codexlink.rpc.call``: one app-server request/response exchange.

Exporting spans requires the ``otel`` extra (``pip install codexlink[otel]``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from opentelemetry import trace

if TYPE_CHECKING:
    from codexlink.config import TelemetrySettings

# ---------------------------------------------------------------------------
# Span attribute keys
# ---------------------------------------------------------------------------

# auth probe
ATTR_CLI_PATH = "codexlink.cli.path"
ATTR_CLI_FOUND = "codexlink.cli.found"
ATTR_EXIT_CODE = "codexlink.process.exit_code"
ATTR_AUTHENTICATED = "codexlink.auth.authenticated"
ATTR_AUTH_METHOD = "codexlink.auth.method"
ATTR_PROBE_FAILURE = "codexlink.auth.failure"

# app-server RPC
ATTR_RPC_METHOD = "codexlink.rpc.method"
ATTR_RPC_ID = "codexlink.rpc.id"
ATTR_RPC_ERROR_CODE = "codexlink.rpc.error_code"

_INSTRUMENTATION_NAME = "codexlink"
_INSTALL_HINT = "Install it with: pip install codexlink[otel]"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a tracer for *name* (a no-op one until telemetry is configured)."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    settings: TelemetrySettings,
    *,
    service_name: str = _INSTRUMENTATION_NAME,
    export_to_console: bool = False,
) -> bool:
    """Install an SDK tracer provider described by *settings*.

    Spans go to ``settings.otlp_endpoint`` over OTLP/gRPC when set, and to
    stdout as JSON when *export_to_console* is true. Returns ``False``
    without touching the global provider when *settings* is disabled.

    Raises:
        ImportError: ``opentelemetry-sdk`` (or, for OTLP export,
            ``opentelemetry-exporter-otlp``) is not installed.
    """
    if not settings.enabled:
        return False

    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = f"opentelemetry-sdk is required for configure_telemetry(). {_INSTALL_HINT}"
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))  # pyright: ignore[reportUnknownVariableType,reportUnknownMemberType]
    for processor in _span_processors(settings.otlp_endpoint, export_to_console):
        provider.add_span_processor(processor)  # pyright: ignore[reportUnknownMemberType]

    trace.set_tracer_provider(provider)  # pyright: ignore[reportUnknownArgumentType]
    return True


def _span_processors(otlp_endpoint: str | None, export_to_console: bool) -> list[Any]:
    from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        BatchSpanProcessor,
        ConsoleSpanExporter,
        SimpleSpanProcessor,
    )

    processors: list[Any] = []
    if export_to_console:
        processors.append(SimpleSpanProcessor(ConsoleSpanExporter()))

    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        except ImportError as exc:
            msg = f"opentelemetry-exporter-otlp is required for OTLP export. {_INSTALL_HINT}"
            raise ImportError(msg) from exc
        processors.append(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))

    return processors
