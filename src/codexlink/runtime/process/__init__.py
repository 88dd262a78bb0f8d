"""Process subsystem — run the external CLI and capture its output."""

from codexlink.runtime.process.executor import ProcessExecutor
from codexlink.runtime.process.local_executor import LocalProcessExecutor
from codexlink.runtime.process.models import ExecutionOutcome, ExecutionRequest, ExecutorConfig

__all__ = [
    "ExecutionOutcome",
    "ExecutionRequest",
    "ExecutorConfig",
    "LocalProcessExecutor",
    "ProcessExecutor",
]
