"""Shared error types for the process runtime layer."""


class CliRuntimeError(Exception):
    """Base error for all failures running the external CLI."""


class CliNotFoundError(CliRuntimeError):
    """The Codex CLI executable could not be located."""

    def __init__(self, command: str = "codex") -> None:
        self.command = command
        super().__init__(
            f"Codex CLI not found: {command} (install it with: npm install -g @openai/codex)"
        )


class ExecutionError(CliRuntimeError):
    """A child process could not be spawned or read."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Execution error" + (f": {detail}" if detail else ""))


class ExecutionTimeoutError(ExecutionError):
    """A child process exceeded the configured timeout."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Execution timed out after {timeout}s")
