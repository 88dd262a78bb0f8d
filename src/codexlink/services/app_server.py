"""AppServerService — spawn-on-demand access to the Codex app-server.

Each operation launches its own ``codex app-server`` process, performs the
handshake, issues its requests and tears the process down again. Nothing
long-lived is kept apart from the resolved CLI path.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from codexlink.protocols.appserver.client import DEFAULT_REQUEST_TIMEOUT, AppServerClient
from codexlink.protocols.appserver.schema import AccountState, ModelDescriptor, RateLimitSnapshot
from codexlink.protocols.appserver.transport import SessionChannel, StdioChannel
from codexlink.runtime.errors import CliNotFoundError
from codexlink.runtime.locator import CliLocator, PathResolver

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 20

ChannelFactory = Callable[[str], SessionChannel]


class AppServerService:
    """High-level app-server operations.

    RPC failures propagate as :class:`~codexlink.protocols.errors.RpcError`;
    a missing CLI raises :class:`~codexlink.runtime.errors.CliNotFoundError`.
    """

    def __init__(
        self,
        locator: PathResolver | None = None,
        *,
        cli_path: str | None = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        channel_factory: ChannelFactory | None = None,
    ) -> None:
        self._locator = locator or CliLocator()
        self._cli_path = cli_path
        self._request_timeout = request_timeout
        self._channel_factory: ChannelFactory = channel_factory or StdioChannel

    def resolve_cli_path(self) -> str | None:
        """Resolve (and remember) the CLI path; ``None`` if not installed."""
        if self._cli_path is None:
            self._cli_path = self._locator.find()
        return self._cli_path

    def is_available(self) -> bool:
        return self.resolve_cli_path() is not None

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AppServerClient]:
        """Yield a connected client bound to a fresh app-server process."""
        cli_path = self.resolve_cli_path()
        if cli_path is None:
            raise CliNotFoundError()
        channel = self._channel_factory(cli_path)
        async with AppServerClient(channel, request_timeout=self._request_timeout) as client:
            yield client

    async def get_models(self, *, max_pages: int = DEFAULT_MAX_PAGES) -> list[ModelDescriptor]:
        """Collect every ``model/list`` page within one session."""
        models: list[ModelDescriptor] = []
        async with self.session() as client:
            cursor: str | None = None
            for _ in range(max_pages):
                page = await client.list_models(cursor)
                models.extend(page.data)
                cursor = page.next_cursor
                if cursor is None:
                    break
            else:
                logger.warning("model/list still paginating after %d pages; stopping", max_pages)
        logger.info("Fetched %d models from app-server", len(models))
        return models

    async def get_account(self) -> AccountState:
        async with self.session() as client:
            return await client.read_account()

    async def get_rate_limits(self) -> RateLimitSnapshot:
        async with self.session() as client:
            return await client.read_rate_limits()
