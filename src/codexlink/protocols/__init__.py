"""Protocol layer — JSON-RPC integration with the Codex app-server."""

from codexlink.protocols.errors import (
    DecodeError,
    ProtocolError,
    RemoteError,
    RequestCancelledError,
    RequestTimeoutError,
    RpcError,
    TransportError,
)

__all__ = [
    "DecodeError",
    "ProtocolError",
    "RemoteError",
    "RequestCancelledError",
    "RequestTimeoutError",
    "RpcError",
    "TransportError",
]
