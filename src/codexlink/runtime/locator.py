"""CLI path resolution.

Looks the Codex CLI up on ``PATH`` first and then in the usual per-user and
package-manager install locations that are often missing from ``PATH`` when
the host application is launched from a desktop environment.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

CODEX_COMMAND = "codex"

_COMMON_INSTALL_DIRS: tuple[str, ...] = (
    "~/.local/bin",
    "~/.npm-global/bin",
    "~/.volta/bin",
    "~/.bun/bin",
    "/usr/local/bin",
    "/opt/homebrew/bin",
)


@runtime_checkable
class PathResolver(Protocol):
    """Locates an installed CLI or reports it absent."""

    def find(self) -> str | None: ...


class CliLocator:
    """Resolve the absolute path of the Codex CLI.

    Satisfies :class:`PathResolver`. Returns ``None`` when nothing
    executable is found; never raises.
    """

    def __init__(
        self,
        command: str = CODEX_COMMAND,
        *,
        search_dirs: Sequence[str] = _COMMON_INSTALL_DIRS,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self._command = command
        self._search_dirs = tuple(search_dirs)
        self._which = which

    @property
    def command(self) -> str:
        return self._command

    def find(self) -> str | None:
        """Return the CLI path, or ``None`` if it is not installed."""
        found = self._which(self._command)
        if found:
            return found

        for directory in self._search_dirs:
            candidate = Path(directory).expanduser() / self._command
            if candidate.is_file() and os.access(candidate, os.X_OK):
                logger.debug("Found %s outside PATH at %s", self._command, candidate)
                return str(candidate)

        logger.info("%s CLI not found", self._command)
        return None
