"""Tests for UsageService."""

import base64
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from codexlink.protocols.appserver.schema import AccountState, RateLimitsResponse
from codexlink.protocols.errors import RemoteError, TransportError
from codexlink.runtime.errors import CliNotFoundError
from codexlink.services.usage import (
    OPENAI_AUTH_CLAIM,
    PlanType,
    UsageService,
    decode_jwt_claims,
    default_auth_file,
    normalize_plan_type,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _jwt(claims: dict[str, Any]) -> str:
    def segment(data: dict[str, Any]) -> str:
        return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()

    return f"{segment({'alg': 'none'})}.{segment(claims)}.signature"


def _write_auth_file(path: Path, claims: dict[str, Any]) -> Path:
    path.write_text(json.dumps({"tokens": {"id_token": _jwt(claims), "access_token": "x"}}))
    return path


@pytest.fixture
def app_server(account_result: dict[str, Any], rate_limits_result: dict[str, Any]) -> MagicMock:
    service = MagicMock()
    service.is_available.return_value = True
    service.get_account = AsyncMock(return_value=AccountState.model_validate(account_result))
    service.get_rate_limits = AsyncMock(
        return_value=RateLimitsResponse.model_validate(rate_limits_result).rate_limits
    )
    return service


def _usage(app_server: MagicMock, auth_file: Path) -> UsageService:
    return UsageService(app_server, auth_file=auth_file, clock=lambda: NOW)


class TestHelpers:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("plus", PlanType.PLUS),
            ("PRO", PlanType.PRO),
            ("enterprise", PlanType.ENTERPRISE),
            ("unknown", None),
            ("galactic", None),
            ("", None),
            (None, None),
        ],
    )
    def test_normalize_plan_type(self, raw: str | None, expected: PlanType | None) -> None:
        assert normalize_plan_type(raw) is expected

    def test_decode_jwt_claims(self) -> None:
        assert decode_jwt_claims(_jwt({"plan": "team"})) == {"plan": "team"}

    @pytest.mark.parametrize("token", ["", "a.b", "a.!!!.c", f"a.{base64.b64encode(b'[1]').decode()}.c"])
    def test_decode_jwt_claims_malformed(self, token: str) -> None:
        assert decode_jwt_claims(token) is None

    def test_default_auth_file_honours_codex_home(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("CODEX_HOME", str(tmp_path))
        assert default_auth_file() == tmp_path / "auth.json"

    def test_default_auth_file_in_home(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CODEX_HOME", raising=False)
        assert default_auth_file() == Path.home() / ".codex" / "auth.json"


class TestFetchUsage:
    async def test_from_app_server(self, app_server: MagicMock, tmp_path: Path) -> None:
        usage = await _usage(app_server, tmp_path / "auth.json").fetch_usage()

        limits = usage.rate_limits
        assert limits.plan_type is PlanType.PRO
        assert limits.primary is not None
        assert limits.primary.used_percent == 42.5
        assert limits.secondary is not None
        assert limits.secondary.window_duration_mins == 10080
        assert usage.last_updated == NOW

    async def test_account_plan_when_limits_have_none(
        self, app_server: MagicMock, tmp_path: Path
    ) -> None:
        app_server.get_rate_limits.return_value = RateLimitsResponse.model_validate(
            {"rateLimits": {}}
        ).rate_limits
        usage = await _usage(app_server, tmp_path / "auth.json").fetch_usage()
        assert usage.rate_limits.plan_type is PlanType.PLUS
        assert usage.rate_limits.primary is None

    async def test_rate_limit_failure_keeps_account(
        self, app_server: MagicMock, tmp_path: Path
    ) -> None:
        app_server.get_rate_limits.side_effect = RemoteError("account/rateLimits/read", -32001, "no")
        usage = await _usage(app_server, tmp_path / "auth.json").fetch_usage()
        assert usage.rate_limits.plan_type is PlanType.PLUS
        assert usage.rate_limits.primary is None

    async def test_account_failure_falls_back_to_auth_file(
        self, app_server: MagicMock, tmp_path: Path
    ) -> None:
        app_server.get_account.side_effect = TransportError("Channel closed")
        auth_file = _write_auth_file(
            tmp_path / "auth.json", {OPENAI_AUTH_CLAIM: {"chatgpt_plan_type": "team"}}
        )
        usage = await _usage(app_server, auth_file).fetch_usage()
        assert usage.rate_limits.plan_type is PlanType.TEAM
        assert usage.rate_limits.primary is None

    async def test_unknown_when_everything_fails(
        self, app_server: MagicMock, tmp_path: Path
    ) -> None:
        app_server.get_account.side_effect = TransportError("Channel closed")
        usage = await _usage(app_server, tmp_path / "missing.json").fetch_usage()
        assert usage.rate_limits.plan_type is PlanType.UNKNOWN

    async def test_cli_missing(self, app_server: MagicMock, tmp_path: Path) -> None:
        app_server.is_available.return_value = False
        with pytest.raises(CliNotFoundError):
            await _usage(app_server, tmp_path / "auth.json").fetch_usage()

    async def test_unexpected_error_propagates(
        self, app_server: MagicMock, tmp_path: Path
    ) -> None:
        app_server.get_account.side_effect = KeyError("bug")
        with pytest.raises(KeyError):
            await _usage(app_server, tmp_path / "auth.json").fetch_usage()


class TestAuthFilePlan:
    def _service(self, auth_file: Path) -> UsageService:
        return UsageService(MagicMock(), auth_file=auth_file, clock=lambda: NOW)

    def test_openai_claim(self, tmp_path: Path) -> None:
        auth_file = _write_auth_file(
            tmp_path / "auth.json",
            {
                OPENAI_AUTH_CLAIM: {
                    "chatgpt_plan_type": "pro",
                    "chatgpt_subscription_active_until": "2026-12-31T00:00:00+00:00",
                }
            },
        )
        assert self._service(auth_file).plan_type_from_auth_file() is PlanType.PRO

    def test_expired_subscription_is_free(self, tmp_path: Path) -> None:
        auth_file = _write_auth_file(
            tmp_path / "auth.json",
            {
                OPENAI_AUTH_CLAIM: {
                    "chatgpt_plan_type": "plus",
                    "chatgpt_subscription_active_until": "2025-01-01T00:00:00",
                }
            },
        )
        assert self._service(auth_file).plan_type_from_auth_file() is PlanType.FREE

    def test_fallback_claim(self, tmp_path: Path) -> None:
        auth_file = _write_auth_file(tmp_path / "auth.json", {"plan_type": "edu"})
        assert self._service(auth_file).plan_type_from_auth_file() is PlanType.EDU

    def test_unrecognised_plan(self, tmp_path: Path) -> None:
        auth_file = _write_auth_file(tmp_path / "auth.json", {"plan": "galactic"})
        assert self._service(auth_file).plan_type_from_auth_file() is PlanType.UNKNOWN

    def test_missing_file(self, tmp_path: Path) -> None:
        assert self._service(tmp_path / "nope.json").plan_type_from_auth_file() is PlanType.UNKNOWN

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "auth.json"
        path.write_text("{not json")
        assert self._service(path).plan_type_from_auth_file() is PlanType.UNKNOWN

    def test_no_id_token(self, tmp_path: Path) -> None:
        path = tmp_path / "auth.json"
        path.write_text(json.dumps({"OPENAI_API_KEY": "sk-test"}))
        assert self._service(path).plan_type_from_auth_file() is PlanType.UNKNOWN

    def test_malformed_id_token(self, tmp_path: Path) -> None:
        path = tmp_path / "auth.json"
        path.write_text(json.dumps({"tokens": {"id_token": "not-a-jwt"}}))
        assert self._service(path).plan_type_from_auth_file() is PlanType.UNKNOWN
