"""Data models for the process execution subsystem."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ExecutorConfig(BaseModel):
    """Configuration for a process executor."""

    timeout: float = Field(default=15.0, gt=0, description="Max execution time in seconds.")
    env: dict[str, str] = Field(
        default_factory=dict,
        description="Environment overrides applied to every request.",
    )


class ExecutionRequest(BaseModel):
    """A request to run an executable and capture its output."""

    command: list[str] = Field(..., min_length=1, description="Executable and arguments.")
    env: dict[str, str] = Field(
        default_factory=dict,
        description="Overrides merged into the inherited environment.",
    )
    cwd: str | None = Field(default=None, description="Working directory (inherited if unset).")
    stdin: str | None = Field(default=None, description="Optional stdin input.")
    timeout: float | None = Field(default=None, gt=0, description="Per-request timeout override.")


class ExecutionOutcome(BaseModel):
    """Raw result of a finished child process."""

    model_config = ConfigDict(frozen=True)

    exit_code: int = Field(..., description="Process exit code.")
    stdout: str = Field(default="", description="Captured stdout.")
    stderr: str = Field(default="", description="Captured stderr.")
