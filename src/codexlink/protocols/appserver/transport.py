"""Session channels — how the RPC client reaches a running app-server.

Each channel satisfies the :class:`SessionChannel` protocol, providing
``connect``, ``send``, ``receive``, and ``close``. The client never sees
bytes or processes, only decoded JSON objects.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from codexlink.protocols.errors import TransportError

logger = logging.getLogger(__name__)

APP_SERVER_ARGS: tuple[str, ...] = ("app-server",)

# Large enough for a full model/list page on one line.
_STREAM_LIMIT = 4 * 1024 * 1024


@runtime_checkable
class SessionChannel(Protocol):
    """Abstract transport for app-server JSON-RPC communication."""

    async def connect(self) -> None: ...
    async def send(self, data: dict[str, Any]) -> None: ...
    async def receive(self) -> dict[str, Any]: ...
    async def close(self) -> None: ...


class StdioChannel:
    """Spawns ``codex app-server`` and talks to it over stdin/stdout.

    Sends and receives newline-delimited JSON. Blank and non-JSON lines on
    stdout are skipped. The child inherits the caller's environment and
    working directory, with ``TERM=dumb`` merged in.
    """

    def __init__(
        self,
        cli_path: str,
        args: Sequence[str] = APP_SERVER_ARGS,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._argv = [cli_path, *args]
        self._env = {**os.environ, "TERM": "dumb", **(env or {})}
        self._process: asyncio.subprocess.Process | None = None

    async def connect(self) -> None:
        """Launch the subprocess."""
        try:
            self._process = await asyncio.create_subprocess_exec(
                *self._argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
                env=self._env,
                limit=_STREAM_LIMIT,
            )
        except OSError as exc:
            raise TransportError(f"Failed to start {self._argv[0]}: {exc}") from exc

    async def send(self, data: dict[str, Any]) -> None:
        """Write a JSON line to stdin."""
        if self._process is None or self._process.stdin is None:
            msg = "Channel not connected"
            raise TransportError(msg)
        line = json.dumps(data) + "\n"
        try:
            self._process.stdin.write(line.encode())
            await self._process.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as exc:
            raise TransportError(f"Channel closed while sending: {exc}") from exc

    async def receive(self) -> dict[str, Any]:
        """Read the next JSON object from stdout."""
        if self._process is None or self._process.stdout is None:
            msg = "Channel not connected"
            raise TransportError(msg)
        while True:
            line = await self._process.stdout.readline()
            if not line:
                msg = "Channel closed"
                raise TransportError(msg)
            text = line.decode(errors="replace").strip()
            if not text:
                continue
            try:
                message = json.loads(text)
            except json.JSONDecodeError:
                logger.debug("Skipping non-JSON app-server output: %.200s", text)
                continue
            if isinstance(message, dict):
                return message
            logger.debug("Skipping non-object app-server message: %.200s", text)

    async def close(self) -> None:
        """Terminate the subprocess."""
        if self._process is not None:
            if self._process.stdin:
                self._process.stdin.close()
            if self._process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    self._process.terminate()
            await self._process.wait()
            self._process = None
