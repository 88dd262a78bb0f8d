"""Settings for codexlink and the YAML loader that produces them."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

CONFIG_ENV_VAR = "CODEXLINK_CONFIG"


class ConfigError(Exception):
    """Raised when a settings file cannot be read or fails validation."""


class TelemetrySettings(BaseModel):
    """Optional telemetry configuration."""

    enabled: bool = False
    otlp_endpoint: str | None = None


class CodexLinkSettings(BaseModel):
    """Effective configuration for probing and talking to the Codex CLI."""

    cli_path: str | None = Field(
        default=None,
        description="Explicit CLI path; resolved from PATH and common install dirs if unset.",
    )
    probe_timeout: float = Field(default=15.0, gt=0, description="Seconds for `codex login status`.")
    request_timeout: float = Field(default=10.0, gt=0, description="Seconds per JSON-RPC request.")
    cache_dir: Path = Field(
        default_factory=lambda: Path.home() / ".codexlink",
        description="Directory holding the model cache file.",
    )
    model_cache_ttl: float = Field(default=3600.0, gt=0, description="Model cache lifetime in seconds.")
    auth_file: Path | None = Field(
        default=None,
        description="Codex auth file; defaults to $CODEX_HOME/auth.json or ~/.codex/auth.json.",
    )
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)


class SettingsLoader:
    """Load and validate a YAML settings file into :class:`CodexLinkSettings`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> CodexLinkSettings:
        """Read YAML, interpolate env vars, and validate.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing. An empty file
        yields the defaults.

        Raises:
            ConfigError: On read errors, YAML parse errors or validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Settings YAML must be a mapping")

        try:
            return CodexLinkSettings.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


def load_settings(path: str | Path | None = None) -> CodexLinkSettings:
    """Load settings from *path*, then ``$CODEXLINK_CONFIG``, else defaults."""
    source = path or os.environ.get(CONFIG_ENV_VAR)
    if not source:
        return CodexLinkSettings()
    return SettingsLoader(Path(source).expanduser()).load()
