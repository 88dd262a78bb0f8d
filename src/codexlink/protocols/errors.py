"""Shared error types for the JSON-RPC protocol layer.

Every failure of an RPC call surfaces as an :class:`RpcError` subclass so
callers can tell "the tool answered with no models" apart from "the tool
could not be asked".
"""

from __future__ import annotations

from typing import Any

# JSON-RPC 2.0 reserved error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class RpcError(Exception):
    """Base error for all JSON-RPC failures."""


class TransportError(RpcError):
    """The session channel failed, closed, or was never connected."""


class ProtocolError(RpcError):
    """A response envelope violated the JSON-RPC contract.

    Raised for responses carrying both or neither of ``result``/``error``,
    and for responses whose id matches no outstanding request. Usually a
    sign of a tool version mismatch.
    """


class DecodeError(RpcError):
    """A well-formed response whose ``result`` does not fit the method's shape."""

    def __init__(self, method: str, detail: str = "") -> None:
        self.method = method
        self.detail = detail
        super().__init__(f"Cannot decode result of {method}" + (f": {detail}" if detail else ""))


class RemoteError(RpcError):
    """The remote side answered with an explicit ``error`` object."""

    def __init__(self, method: str, code: int, message: str, data: Any = None) -> None:
        self.method = method
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"{method} failed with code {code}: {message}")


class RequestTimeoutError(RpcError):
    """No response arrived within the request timeout."""

    def __init__(self, method: str, timeout: float) -> None:
        self.method = method
        self.timeout = timeout
        super().__init__(f"Request timeout: {method} after {timeout}s")


class RequestCancelledError(RpcError):
    """The request was cancelled by id before its response arrived."""

    def __init__(self, request_id: int, method: str) -> None:
        self.request_id = request_id
        self.method = method
        super().__init__(f"Request {request_id} ({method}) was cancelled")
