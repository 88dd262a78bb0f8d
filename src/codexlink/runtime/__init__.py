"""Process runtime — CLI resolution and child-process execution."""

from codexlink.runtime.errors import (
    CliNotFoundError,
    CliRuntimeError,
    ExecutionError,
    ExecutionTimeoutError,
)
from codexlink.runtime.locator import CODEX_COMMAND, CliLocator, PathResolver

__all__ = [
    "CODEX_COMMAND",
    "CliLocator",
    "CliNotFoundError",
    "CliRuntimeError",
    "ExecutionError",
    "ExecutionTimeoutError",
    "PathResolver",
]
