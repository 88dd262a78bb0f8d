"""LocalProcessExecutor — runs commands on the host via asyncio subprocesses."""

from __future__ import annotations

import asyncio
import logging
import os

from codexlink.runtime.errors import ExecutionError, ExecutionTimeoutError
from codexlink.runtime.process.models import ExecutionOutcome, ExecutionRequest, ExecutorConfig

logger = logging.getLogger(__name__)


class LocalProcessExecutor:
    """Host-local command executor.

    Satisfies the :class:`~codexlink.runtime.process.executor.ProcessExecutor`
    protocol. The child inherits the caller's environment and working
    directory; ``config.env`` and ``request.env`` are merged on top, in that
    order.
    """

    def __init__(self, config: ExecutorConfig | None = None) -> None:
        self._config = config or ExecutorConfig()

    async def run(self, request: ExecutionRequest) -> ExecutionOutcome:
        """Run a command and capture stdout, stderr and the exit code."""
        logger.debug("Running %s", request.command)

        timeout = request.timeout or self._config.timeout
        env = {**os.environ, **self._config.env, **request.env}

        try:
            proc = await asyncio.create_subprocess_exec(
                *request.command,
                stdin=asyncio.subprocess.PIPE if request.stdin else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
                cwd=request.cwd,
            )
        except OSError as exc:
            raise ExecutionError(str(exc)) from exc

        stdin_bytes = request.stdin.encode() if request.stdin else None
        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(input=stdin_bytes),
                timeout=timeout,
            )
        except TimeoutError:
            proc.kill()
            await proc.wait()
            raise ExecutionTimeoutError(timeout) from None
        except OSError as exc:
            raise ExecutionError(str(exc)) from exc

        return ExecutionOutcome(
            exit_code=proc.returncode if proc.returncode is not None else -1,
            stdout=stdout.decode(errors="replace") if stdout else "",
            stderr=stderr.decode(errors="replace") if stderr else "",
        )
