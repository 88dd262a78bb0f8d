"""Shared fixtures: an in-memory app-server session channel."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from codexlink.protocols.errors import TransportError

Responder = Callable[[dict[str, Any]], list[dict[str, Any]]]

_CLOSED = object()


class FakeChannel:
    """A ``SessionChannel`` backed by a queue.

    Every sent message is recorded in ``sent``. An optional *responder*
    turns each sent message into zero or more replies, which are queued for
    ``receive()``. Tests can also ``push`` messages directly.
    """

    def __init__(self, responder: Responder | None = None) -> None:
        self.sent: list[dict[str, Any]] = []
        self.connected = False
        self.closed = False
        self._responder = responder
        self._inbox: asyncio.Queue[Any] = asyncio.Queue()

    async def connect(self) -> None:
        self.connected = True

    async def send(self, data: dict[str, Any]) -> None:
        self.sent.append(data)
        if self._responder is not None:
            for reply in self._responder(data):
                self._inbox.put_nowait(reply)

    def push(self, message: Any) -> None:
        self._inbox.put_nowait(message)

    def hang_up(self) -> None:
        self._inbox.put_nowait(_CLOSED)

    async def receive(self) -> dict[str, Any]:
        message = await self._inbox.get()
        if message is _CLOSED:
            msg = "Channel closed"
            raise TransportError(msg)
        return message  # type: ignore[no-any-return]

    async def close(self) -> None:
        self.closed = True

    def requests(self, method: str) -> list[dict[str, Any]]:
        return [m for m in self.sent if m.get("method") == method]


def scripted(replies: dict[str, Any]) -> Responder:
    """Build a responder answering ``initialize`` plus the given methods.

    Each value in *replies* is either a dict of envelope members (``result``
    and/or ``error``) or a callable taking the request and returning one.
    Methods missing from *replies* get no answer.
    """

    def respond(request: dict[str, Any]) -> list[dict[str, Any]]:
        if "id" not in request or "method" not in request:
            return []
        method = request["method"]
        if method == "initialize" and method not in replies:
            return [{"id": request["id"], "result": {"userAgent": "codex_cli_rs/0.0.0"}}]
        if method not in replies:
            return []
        reply = replies[method]
        if callable(reply):
            reply = reply(request)
        return [{"id": request["id"], **reply}]

    return respond


@pytest.fixture
def channel_factory() -> Callable[..., FakeChannel]:
    """Return a factory: ``channel_factory({"model/list": {"result": ...}})``."""

    def factory(replies: dict[str, Any] | None = None, *, auto_reply: bool = True) -> FakeChannel:
        return FakeChannel(scripted(replies or {}) if auto_reply else None)

    return factory


# ---------------------------------------------------------------------------
# Wire payload helpers
# ---------------------------------------------------------------------------


def model_payload(model_id: str, *, efforts: int = 2, is_default: bool = False) -> dict[str, Any]:
    return {
        "id": model_id,
        "model": model_id,
        "displayName": model_id.upper(),
        "description": f"{model_id} description",
        "supportedReasoningEfforts": [
            {"reasoningEffort": level, "description": f"{level} effort"}
            for level in ("low", "medium", "high")[:efforts]
        ],
        "defaultReasoningEffort": "medium",
        "isDefault": is_default,
    }


@pytest.fixture
def model_list_result() -> dict[str, Any]:
    return {
        "data": [
            model_payload("gpt-5.2-codex", is_default=True),
            model_payload("gpt-5.1-codex-mini", efforts=0),
        ],
        "nextCursor": None,
    }


@pytest.fixture
def account_result() -> dict[str, Any]:
    return {
        "account": {"type": "chatgpt", "email": "dev@example.com", "planType": "plus"},
        "requiresOpenaiAuth": True,
    }


@pytest.fixture
def rate_limits_result() -> dict[str, Any]:
    return {
        "rateLimits": {
            "primary": {"usedPercent": 42.5, "windowDurationMins": 300, "resetsAt": 1_760_000_000},
            "secondary": {"usedPercent": 10, "windowDurationMins": 10080, "resetsAt": 1_760_500_000},
            "planType": "pro",
        }
    }


@pytest.fixture
def make_model_payload() -> Callable[..., dict[str, Any]]:
    return model_payload
