"""App-server JSON-RPC envelope.

The Codex app-server speaks a JSON-RPC 2.0 dialect without the ``jsonrpc``
member. Requests carry a caller-assigned integer id; responses echo it with
exactly one of ``result`` or ``error``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, StrictInt, ValidationError, model_validator

from codexlink.protocols.errors import ProtocolError

# ---------------------------------------------------------------------------
# Outgoing messages
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A request expecting a correlated response."""

    model_config = ConfigDict(frozen=True)

    method: str
    id: StrictInt
    params: Any = None

    def to_wire(self) -> dict[str, Any]:
        """Serialize, omitting ``params`` when there are none."""
        return self.model_dump(exclude_none=True)


class JsonRpcNotification(BaseModel):
    """A one-way message; no response is expected."""

    model_config = ConfigDict(frozen=True)

    method: str
    params: Any = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Incoming messages
# ---------------------------------------------------------------------------


class JsonRpcErrorObject(BaseModel):
    """The ``error`` member of a failed response."""

    model_config = ConfigDict(frozen=True)

    code: StrictInt
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A response to one of our requests.

    A ``result`` or ``error`` member that is missing or ``null`` counts as
    absent. Exactly one of them must be present.
    """

    model_config = ConfigDict(frozen=True)

    id: StrictInt
    result: Any = None
    error: JsonRpcErrorObject | None = None

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> JsonRpcResponse:
        has_result = self.result is not None
        has_error = self.error is not None
        if has_result and has_error:
            msg = "response carries both 'result' and 'error'"
            raise ValueError(msg)
        if not has_result and not has_error:
            msg = "response carries neither 'result' nor 'error'"
            raise ValueError(msg)
        return self

    @classmethod
    def from_wire(cls, raw: Any) -> JsonRpcResponse:
        """Validate a raw message, raising :class:`ProtocolError` on violation."""
        if not isinstance(raw, dict):
            msg = f"Malformed response envelope: expected an object, got {type(raw).__name__}"
            raise ProtocolError(msg)
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            msg = f"Malformed response envelope: {validation_summary(exc)}"
            raise ProtocolError(msg) from exc


def validation_summary(exc: ValidationError) -> str:
    """Return the first validation failure as ``loc: message``."""
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {first['msg']}" if loc else first["msg"]
