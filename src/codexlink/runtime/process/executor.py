"""ProcessExecutor protocol — the common interface for running the CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from codexlink.runtime.process.models import ExecutionOutcome, ExecutionRequest


@runtime_checkable
class ProcessExecutor(Protocol):
    """Runs an executable with args, env and cwd and captures its output.

    Implementations raise :class:`~codexlink.runtime.errors.ExecutionError`
    when the process cannot be spawned or read, and
    :class:`~codexlink.runtime.errors.ExecutionTimeoutError` when it
    outlives its timeout. A non-zero exit code is *not* an error.
    """

    async def run(self, request: ExecutionRequest) -> ExecutionOutcome:
        """Run a command and return its outcome."""
        ...
