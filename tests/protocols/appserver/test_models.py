"""Tests for the JSON-RPC envelope models."""

import pytest

from codexlink.protocols.appserver.models import (
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
)
from codexlink.protocols.errors import ProtocolError


class TestJsonRpcRequest:
    def test_wire_without_params(self) -> None:
        req = JsonRpcRequest(method="account/read", id=3)
        assert req.to_wire() == {"method": "account/read", "id": 3}

    def test_wire_with_params(self) -> None:
        req = JsonRpcRequest(method="model/list", id=1, params={"cursor": "abc"})
        assert req.to_wire() == {"method": "model/list", "id": 1, "params": {"cursor": "abc"}}

    def test_empty_params_are_kept(self) -> None:
        req = JsonRpcRequest(method="model/list", id=1, params={})
        assert req.to_wire()["params"] == {}

    def test_no_jsonrpc_member(self) -> None:
        assert "jsonrpc" not in JsonRpcRequest(method="x", id=1).to_wire()


class TestJsonRpcNotification:
    def test_wire_has_no_id(self) -> None:
        assert JsonRpcNotification(method="initialized").to_wire() == {"method": "initialized"}


class TestJsonRpcResponse:
    def test_result_response(self) -> None:
        resp = JsonRpcResponse.from_wire({"id": 1, "result": {"ok": True}})
        assert resp.id == 1
        assert resp.result == {"ok": True}
        assert resp.error is None

    def test_error_response(self) -> None:
        resp = JsonRpcResponse.from_wire(
            {"id": 2, "error": {"code": -32001, "message": "auth required", "data": {"x": 1}}}
        )
        assert resp.result is None
        assert resp.error is not None
        assert resp.error.code == -32001
        assert resp.error.message == "auth required"
        assert resp.error.data == {"x": 1}

    def test_falsy_result_is_present(self) -> None:
        resp = JsonRpcResponse.from_wire({"id": 1, "result": {}})
        assert resp.result == {}

    def test_both_rejected(self) -> None:
        with pytest.raises(ProtocolError, match="both"):
            JsonRpcResponse.from_wire(
                {"id": 1, "result": {}, "error": {"code": 1, "message": "x"}}
            )

    def test_neither_rejected(self) -> None:
        with pytest.raises(ProtocolError, match="neither"):
            JsonRpcResponse.from_wire({"id": 1})

    def test_null_members_count_as_absent(self) -> None:
        with pytest.raises(ProtocolError, match="neither"):
            JsonRpcResponse.from_wire({"id": 1, "result": None, "error": None})

    def test_string_id_rejected(self) -> None:
        with pytest.raises(ProtocolError):
            JsonRpcResponse.from_wire({"id": "1", "result": {}})

    def test_malformed_error_object_rejected(self) -> None:
        with pytest.raises(ProtocolError):
            JsonRpcResponse.from_wire({"id": 1, "error": {"message": "no code"}})

    def test_non_object_rejected(self) -> None:
        with pytest.raises(ProtocolError, match="expected an object"):
            JsonRpcResponse.from_wire([1, 2, 3])
