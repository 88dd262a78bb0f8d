"""AuthProber — decides whether the Codex CLI is authenticated.

Runs ``codex login status`` and trusts only the CLI's own confirmation. An
``OPENAI_API_KEY`` in the environment is never taken as evidence of
authentication; it only labels a session the CLI has already confirmed.

The probe is total: a missing binary, a spawn failure, a crash or a timeout
all resolve to an unauthenticated result, because callers cannot act on
"could not check" any differently from "not logged in".
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from codexlink.auth.classifier import LOGGED_IN_PHRASES, is_logged_in
from codexlink.auth.models import AuthCheckResult
from codexlink.runtime.locator import CliLocator, PathResolver
from codexlink.runtime.process.executor import ProcessExecutor
from codexlink.runtime.process.local_executor import LocalProcessExecutor
from codexlink.runtime.process.models import ExecutionOutcome, ExecutionRequest
from codexlink.utils.telemetry import (
    ATTR_AUTH_METHOD,
    ATTR_AUTHENTICATED,
    ATTR_CLI_FOUND,
    ATTR_CLI_PATH,
    ATTR_EXIT_CODE,
    ATTR_PROBE_FAILURE,
    get_tracer,
)

if TYPE_CHECKING:
    from opentelemetry.trace import Span

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

OPENAI_API_KEY_ENV = "OPENAI_API_KEY"
LOGIN_STATUS_ARGS: tuple[str, ...] = ("login", "status")
TERMINAL_OVERRIDES: dict[str, str] = {"TERM": "dumb"}
DEFAULT_PROBE_TIMEOUT = 15.0


@dataclass(frozen=True)
class _ProbeFailure:
    """Why a probe produced no usable outcome. Never leaves this module."""

    kind: str
    detail: str = ""


class AuthProber:
    """Probe the Codex CLI's login state.

    Parameters
    ----------
    executor:
        Runs the CLI; defaults to :class:`LocalProcessExecutor`.
    locator:
        Resolves the CLI path when no hint is given; defaults to
        :class:`CliLocator`.
    environ:
        Environment consulted for the API-key label (defaults to
        ``os.environ``). The child process always inherits the real
        environment.
    timeout:
        Upper bound on the status command, in seconds.
    phrases:
        Phrases that confirm a logged-in session.
    """

    def __init__(
        self,
        *,
        executor: ProcessExecutor | None = None,
        locator: PathResolver | None = None,
        environ: Mapping[str, str] | None = None,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
        phrases: Iterable[str] = LOGGED_IN_PHRASES,
    ) -> None:
        self._executor = executor or LocalProcessExecutor()
        self._locator = locator or CliLocator()
        self._environ = environ if environ is not None else os.environ
        self._timeout = timeout
        self._phrases = tuple(phrases)

    async def check_authentication(self, cli_path_hint: str | None = None) -> AuthCheckResult:
        """Return the authentication state. Never raises."""
        with _tracer.start_as_current_span("codexlink.auth.probe") as span:
            api_key_in_env = bool(self._environ.get(OPENAI_API_KEY_ENV))
            attempt = await self._probe(cli_path_hint, span)

            if isinstance(attempt, _ProbeFailure):
                span.set_attribute(ATTR_PROBE_FAILURE, attempt.kind)
                result = AuthCheckResult.unauthenticated()
            else:
                span.set_attribute(ATTR_EXIT_CODE, attempt.exit_code)
                if is_logged_in(attempt, self._phrases):
                    result = AuthCheckResult.confirmed(api_key_in_env=api_key_in_env)
                    logger.info("Codex CLI authenticated (%s)", result.method.value)
                else:
                    result = AuthCheckResult.unauthenticated()
                    logger.info("Codex CLI not authenticated (exit code %d)", attempt.exit_code)

            span.set_attribute(ATTR_AUTHENTICATED, result.authenticated)
            span.set_attribute(ATTR_AUTH_METHOD, result.method.value)
            return result

    async def _probe(
        self, cli_path_hint: str | None, span: Span
    ) -> ExecutionOutcome | _ProbeFailure:
        try:
            cli_path = cli_path_hint or self._locator.find()
        except Exception as exc:
            logger.warning("Failed to resolve Codex CLI path: %s", exc)
            return _ProbeFailure("resolution", str(exc))

        span.set_attribute(ATTR_CLI_FOUND, bool(cli_path))
        if not cli_path:
            logger.info("Codex CLI not found")
            return _ProbeFailure("resolution", "not installed")
        span.set_attribute(ATTR_CLI_PATH, cli_path)

        try:
            request = ExecutionRequest(
                command=[cli_path, *LOGIN_STATUS_ARGS],
                env=dict(TERMINAL_OVERRIDES),
                timeout=self._timeout,
            )
            return await self._executor.run(request)
        except Exception as exc:
            logger.warning("Failed to check Codex authentication: %s", exc)
            return _ProbeFailure("execution", str(exc))


async def check_authentication(cli_path_hint: str | None = None) -> AuthCheckResult:
    """Probe with default collaborators. See :meth:`AuthProber.check_authentication`."""
    return await AuthProber().check_authentication(cli_path_hint)
