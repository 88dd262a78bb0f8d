"""Tests for OpenTelemetry tracing helpers and the spans codexlink emits."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from opentelemetry import trace

from codexlink.config import TelemetrySettings
from codexlink.utils.telemetry import (
    _INSTRUMENTATION_NAME,
    ATTR_AUTH_METHOD,
    ATTR_AUTHENTICATED,
    ATTR_CLI_FOUND,
    ATTR_CLI_PATH,
    ATTR_EXIT_CODE,
    ATTR_PROBE_FAILURE,
    ATTR_RPC_ERROR_CODE,
    ATTR_RPC_METHOD,
    configure_telemetry,
    get_tracer,
)


@pytest.fixture
def recorded() -> Any:
    """A tracer backed by an in-memory exporter: ``(tracer, exporter)``."""
    sdk_trace = pytest.importorskip("opentelemetry.sdk.trace")
    export = pytest.importorskip("opentelemetry.sdk.trace.export")
    in_memory = pytest.importorskip("opentelemetry.sdk.trace.export.in_memory_span_exporter")

    exporter = in_memory.InMemorySpanExporter()
    provider = sdk_trace.TracerProvider()
    provider.add_span_processor(export.SimpleSpanProcessor(exporter))
    return provider.get_tracer("test"), exporter


class TestGetTracer:
    def test_returns_tracer(self) -> None:
        assert isinstance(get_tracer("codexlink.test"), trace.Tracer)

    def test_default_name(self) -> None:
        assert isinstance(get_tracer(), trace.Tracer)

    def test_noop_span(self) -> None:
        """Without SDK configured, spans should be no-ops."""
        with get_tracer("codexlink.noop").start_as_current_span("probe") as span:
            span.set_attribute(ATTR_AUTHENTICATED, False)


class TestConfigureTelemetry:
    def test_disabled_is_noop(self) -> None:
        with patch("codexlink.utils.telemetry.trace.set_tracer_provider") as mock_set:
            assert configure_telemetry(TelemetrySettings()) is False
        mock_set.assert_not_called()

    def test_raises_without_sdk(self) -> None:
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            with pytest.raises(ImportError, match=r"codexlink\[otel\]"):
                configure_telemetry(TelemetrySettings(enabled=True))

    def test_otlp_raises_without_exporter(self) -> None:
        pytest.importorskip("opentelemetry.sdk.trace")
        settings = TelemetrySettings(enabled=True, otlp_endpoint="http://localhost:4317")
        with patch.dict(
            "sys.modules",
            {"opentelemetry.exporter.otlp.proto.grpc.trace_exporter": None},
        ):
            with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
                configure_telemetry(settings)

    def test_sets_provider(self) -> None:
        pytest.importorskip("opentelemetry.sdk.trace")
        with patch("codexlink.utils.telemetry.trace.set_tracer_provider") as mock_set:
            configured = configure_telemetry(
                TelemetrySettings(enabled=True),
                service_name="codexlink-test",
                export_to_console=True,
            )

        assert configured is True
        provider = mock_set.call_args.args[0]
        assert provider.resource.attributes["service.name"] == "codexlink-test"


class TestAttributeConstants:
    def test_namespaced(self) -> None:
        for attr in (ATTR_AUTHENTICATED, ATTR_RPC_METHOD, ATTR_PROBE_FAILURE):
            assert attr.startswith("codexlink.")

    def test_instrumentation_name(self) -> None:
        assert _INSTRUMENTATION_NAME == "codexlink"


class TestEmittedSpans:
    async def test_probe_span(self, recorded: Any) -> None:
        from codexlink.auth.prober import AuthProber
        from codexlink.runtime.process.models import ExecutionOutcome

        tracer, exporter = recorded
        executor = MagicMock()
        executor.run = AsyncMock(return_value=ExecutionOutcome(exit_code=0, stdout="Logged in"))
        locator = MagicMock()
        locator.find.return_value = "/usr/bin/codex"

        with patch("codexlink.auth.prober._tracer", tracer):
            await AuthProber(executor=executor, locator=locator, environ={}).check_authentication()

        (span,) = exporter.get_finished_spans()
        assert span.name == "codexlink.auth.probe"
        assert span.attributes[ATTR_CLI_FOUND] is True
        assert span.attributes[ATTR_CLI_PATH] == "/usr/bin/codex"
        assert span.attributes[ATTR_EXIT_CODE] == 0
        assert span.attributes[ATTR_AUTHENTICATED] is True
        assert span.attributes[ATTR_AUTH_METHOD] == "cli_authenticated"

    async def test_probe_failure_span(self, recorded: Any) -> None:
        from codexlink.auth.prober import AuthProber

        tracer, exporter = recorded
        locator = MagicMock()
        locator.find.return_value = None

        with patch("codexlink.auth.prober._tracer", tracer):
            await AuthProber(executor=MagicMock(), locator=locator, environ={}).check_authentication()

        (span,) = exporter.get_finished_spans()
        assert span.attributes[ATTR_PROBE_FAILURE] == "resolution"
        assert span.attributes[ATTR_CLI_FOUND] is False
        assert span.attributes[ATTR_AUTHENTICATED] is False

    async def test_rpc_error_span(self, recorded: Any, channel_factory: Any) -> None:
        from codexlink.protocols.appserver.client import AppServerClient
        from codexlink.protocols.errors import RemoteError

        tracer, exporter = recorded
        channel = channel_factory(
            {"account/read": {"error": {"code": -32001, "message": "auth required"}}}
        )

        with patch("codexlink.protocols.appserver.client._tracer", tracer):
            async with AppServerClient(channel) as client:
                with pytest.raises(RemoteError):
                    await client.read_account()

        spans = [s for s in exporter.get_finished_spans() if s.name == "codexlink.rpc.call"]
        methods = [s.attributes[ATTR_RPC_METHOD] for s in spans]
        assert methods == ["initialize", "account/read"]
        assert spans[1].attributes[ATTR_RPC_ERROR_CODE] == -32001
