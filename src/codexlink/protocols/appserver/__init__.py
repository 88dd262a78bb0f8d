"""Codex app-server protocol — JSON-RPC client, schema and channels."""

from codexlink.protocols.appserver.client import AppServerClient
from codexlink.protocols.appserver.models import (
    JsonRpcErrorObject,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
)
from codexlink.protocols.appserver.schema import (
    METHOD_RESULT_TYPES,
    Account,
    AccountState,
    AccountType,
    ModelDescriptor,
    ModelListPage,
    RateLimitSnapshot,
    RateLimitsResponse,
    RateLimitWindow,
    ReasoningEffortOption,
)
from codexlink.protocols.appserver.transport import SessionChannel, StdioChannel

__all__ = [
    "METHOD_RESULT_TYPES",
    "Account",
    "AccountState",
    "AccountType",
    "AppServerClient",
    "JsonRpcErrorObject",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "ModelDescriptor",
    "ModelListPage",
    "RateLimitSnapshot",
    "RateLimitWindow",
    "RateLimitsResponse",
    "ReasoningEffortOption",
    "SessionChannel",
    "StdioChannel",
]
