"""AppServerClient — JSON-RPC calls against a running Codex app-server.

Implements the ``initialize`` handshake, id-correlated request/response
exchange, and typed decoding of ``model/list``, ``account/read`` and
``account/rateLimits/read`` over any :class:`SessionChannel`.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from codexlink import __version__
from codexlink.protocols.appserver.models import (
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    validation_summary,
)
from codexlink.protocols.appserver.schema import (
    METHOD_ACCOUNT_READ,
    METHOD_INITIALIZE,
    METHOD_INITIALIZED,
    METHOD_MODEL_LIST,
    METHOD_RATE_LIMITS_READ,
    METHOD_RESULT_TYPES,
    AccountState,
    ModelListPage,
    RateLimitSnapshot,
    RateLimitsResponse,
)
from codexlink.protocols.appserver.transport import SessionChannel
from codexlink.protocols.errors import (
    METHOD_NOT_FOUND,
    DecodeError,
    ProtocolError,
    RemoteError,
    RequestCancelledError,
    RequestTimeoutError,
    RpcError,
    TransportError,
)
from codexlink.utils.telemetry import ATTR_RPC_ERROR_CODE, ATTR_RPC_ID, ATTR_RPC_METHOD, get_tracer

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DEFAULT_REQUEST_TIMEOUT = 10.0


def default_client_info() -> dict[str, str]:
    return {"name": "codexlink", "title": "codexlink", "version": __version__}


@dataclass
class _PendingCall:
    method: str
    future: asyncio.Future[JsonRpcResponse]


class AppServerClient:
    """Async context manager around one app-server session.

    Usage::

        async with AppServerClient(StdioChannel(cli_path)) as client:
            page = await client.list_models()
            while page.next_cursor is not None:
                page = await client.list_models(page.next_cursor)

    Ids are assigned in increasing order per client. Every failure raises an
    :class:`~codexlink.protocols.errors.RpcError` subclass; nothing is
    silently replaced by an empty value. The client never paginates on its
    own and keeps no state beyond in-flight requests.
    """

    def __init__(
        self,
        channel: SessionChannel,
        *,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        client_info: dict[str, str] | None = None,
        handshake: bool = True,
    ) -> None:
        self._channel = channel
        self._timeout = request_timeout
        self._client_info = client_info or default_client_info()
        self._handshake = handshake
        self._next_id = 1
        self._pending: dict[int, _PendingCall] = {}
        self._cancelled: set[int] = set()
        self._reader: asyncio.Task[None] | None = None
        self._reader_error: str | None = None
        self._connected = False

    async def __aenter__(self) -> AppServerClient:
        await self.connect()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        """Connect the channel, start reading, and perform the handshake."""
        try:
            await self._channel.connect()
        except RpcError:
            raise
        except Exception as exc:
            raise TransportError(str(exc)) from exc

        self._connected = True
        self._reader_error = None
        self._reader = asyncio.create_task(self._read_loop())

        if self._handshake:
            try:
                await self.call(METHOD_INITIALIZE, {"clientInfo": self._client_info})
                await self.notify(METHOD_INITIALIZED)
            except BaseException:
                await self.close()
                raise

    async def close(self) -> None:
        """Stop reading, fail outstanding calls, and close the channel."""
        if self._reader is not None:
            self._reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader
            self._reader = None
        self._fail_pending(TransportError, "Client closed")
        self._cancelled.clear()
        if self._connected:
            self._connected = False
            await self._channel.close()

    def reserve_id(self) -> int:
        """Hand out the next request id, e.g. to cancel a call later."""
        request_id = self._next_id
        self._next_id += 1
        return request_id

    async def call(
        self,
        method: str,
        params: Any = None,
        *,
        result_type: type[BaseModel] | None = None,
        request_id: int | None = None,
    ) -> Any:
        """Send a request and return its decoded result.

        ``result_type`` defaults to the type registered for *method* in
        ``METHOD_RESULT_TYPES``; methods with no registered type return the
        raw ``result`` payload.

        Raises:
            TransportError: The channel is closed or failed.
            ProtocolError: The response envelope is malformed, or a response
                arrived for an unknown id.
            RemoteError: The app-server answered with an ``error`` object.
            DecodeError: ``result`` does not match the method's shape.
            RequestTimeoutError: No response within the request timeout.
            RequestCancelledError: :meth:`cancel` was called for this id.
        """
        if not self._connected:
            msg = "Client not connected"
            raise TransportError(msg)
        if self._reader_error is not None:
            raise TransportError(self._reader_error)

        rid = request_id if request_id is not None else self.reserve_id()
        if rid in self._pending:
            msg = f"Request id {rid} is already in flight"
            raise ValueError(msg)
        if request_id is not None:
            self._next_id = max(self._next_id, rid + 1)
        # A reused id belongs to this call now, not to an abandoned one.
        self._cancelled.discard(rid)

        future: asyncio.Future[JsonRpcResponse] = asyncio.get_running_loop().create_future()
        self._pending[rid] = _PendingCall(method, future)
        request = JsonRpcRequest(method=method, id=rid, params=params)

        with _tracer.start_as_current_span("codexlink.rpc.call") as span:
            span.set_attribute(ATTR_RPC_METHOD, method)
            span.set_attribute(ATTR_RPC_ID, rid)
            try:
                await self._channel.send(request.to_wire())
                response = await asyncio.wait_for(future, timeout=self._timeout)
            except TimeoutError:
                self._abandon(rid)
                raise RequestTimeoutError(method, self._timeout) from None
            except asyncio.CancelledError:
                self._abandon(rid)
                raise
            except RpcError:
                self._pending.pop(rid, None)
                raise
            except Exception as exc:
                self._pending.pop(rid, None)
                raise TransportError(str(exc)) from exc

            if response.error is not None:
                span.set_attribute(ATTR_RPC_ERROR_CODE, response.error.code)
                raise RemoteError(
                    method,
                    response.error.code,
                    response.error.message,
                    response.error.data,
                )
            return self._decode(method, response.result, result_type)

    async def notify(self, method: str, params: Any = None) -> None:
        """Send a notification (no response expected)."""
        if not self._connected:
            msg = "Client not connected"
            raise TransportError(msg)
        await self._channel.send(JsonRpcNotification(method=method, params=params).to_wire())

    def cancel(self, request_id: int) -> bool:
        """Cancel an in-flight request.

        The waiting caller receives :class:`RequestCancelledError`; a response
        that still arrives for *request_id* is discarded. Returns ``False``
        if no such request is in flight.
        """
        pending = self._pending.pop(request_id, None)
        if pending is None:
            return False
        self._cancelled.add(request_id)
        if not pending.future.done():
            pending.future.set_exception(RequestCancelledError(request_id, pending.method))
        return True

    # -- typed methods ------------------------------------------------------

    async def list_models(self, cursor: str | None = None) -> ModelListPage:
        """Fetch one page of ``model/list``; pass ``next_cursor`` back unchanged."""
        params = {"cursor": cursor} if cursor is not None else {}
        return await self.call(METHOD_MODEL_LIST, params, result_type=ModelListPage)  # type: ignore[no-any-return]

    async def read_account(self) -> AccountState:
        return await self.call(METHOD_ACCOUNT_READ, result_type=AccountState)  # type: ignore[no-any-return]

    async def read_rate_limits(self) -> RateLimitSnapshot:
        response: RateLimitsResponse = await self.call(
            METHOD_RATE_LIMITS_READ, result_type=RateLimitsResponse
        )
        return response.rate_limits

    # -- internals ----------------------------------------------------------

    @staticmethod
    def _decode(method: str, result: Any, result_type: type[BaseModel] | None) -> Any:
        target = result_type or METHOD_RESULT_TYPES.get(method)
        if target is None:
            return result
        try:
            return target.model_validate(result)
        except ValidationError as exc:
            raise DecodeError(method, validation_summary(exc)) from exc

    def _abandon(self, request_id: int) -> None:
        if self._pending.pop(request_id, None) is not None:
            self._cancelled.add(request_id)

    def _fail_pending(self, error_cls: type[RpcError], message: str) -> None:
        pending, self._pending = self._pending, {}
        for call in pending.values():
            if not call.future.done():
                call.future.set_exception(error_cls(message))

    async def _read_loop(self) -> None:
        try:
            while True:
                message = await self._channel.receive()
                await self._dispatch(message)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("App-server channel failed: %s", exc)
            self._reader_error = f"Channel failed: {exc}"
            self._fail_pending(TransportError, self._reader_error)

    async def _dispatch(self, message: dict[str, Any]) -> None:
        if "method" in message:
            await self._handle_server_message(message)
            return

        raw_id = message.get("id")
        if not isinstance(raw_id, int) or isinstance(raw_id, bool):
            logger.warning("App-server sent a response without a usable id: %.200r", message)
            self._fail_pending(ProtocolError, f"Response without a usable id: {raw_id!r}")
            return

        if raw_id in self._cancelled:
            self._cancelled.discard(raw_id)
            logger.debug("Discarding late response for cancelled request %d", raw_id)
            return

        pending = self._pending.pop(raw_id, None)
        if pending is None:
            logger.warning("App-server answered unknown request id %d", raw_id)
            self._fail_pending(ProtocolError, f"Response for unknown request id {raw_id}")
            return

        try:
            response = JsonRpcResponse.from_wire(message)
        except ProtocolError as exc:
            pending.future.set_exception(exc)
            return
        pending.future.set_result(response)

    async def _handle_server_message(self, message: dict[str, Any]) -> None:
        method = message["method"]
        if "id" not in message:
            logger.debug("Ignoring app-server notification %s", method)
            return
        # Server-initiated requests (e.g. approvals) are outside this client's scope.
        logger.debug("Rejecting app-server request %s", method)
        await self._channel.send(
            {
                "id": message["id"],
                "error": {"code": METHOD_NOT_FOUND, "message": f"Unsupported request: {method}"},
            }
        )
