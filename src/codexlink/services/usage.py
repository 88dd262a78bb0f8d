"""UsageService — plan type and rate-limit usage for the Codex account.

Priority order:

1. The app-server (``account/read`` + ``account/rateLimits/read``), which
   reports live data.
2. The Codex auth file, whose ``id_token`` JWT carries the plan type.
3. ``unknown``.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import os
from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from codexlink.protocols.appserver.schema import AccountState, RateLimitSnapshot, RateLimitWindow
from codexlink.protocols.errors import RpcError
from codexlink.runtime.errors import CliNotFoundError
from codexlink.services.app_server import AppServerService

logger = logging.getLogger(__name__)

CODEX_HOME_ENV = "CODEX_HOME"
OPENAI_AUTH_CLAIM = "https://api.openai.com/auth"
_FALLBACK_PLAN_CLAIMS = (
    "https://chatgpt.com/account_type",
    "account_type",
    "plan",
    "plan_type",
)


class PlanType(str, Enum):
    FREE = "free"
    PLUS = "plus"
    PRO = "pro"
    TEAM = "team"
    ENTERPRISE = "enterprise"
    EDU = "edu"
    UNKNOWN = "unknown"


class UsageWindow(BaseModel):
    used_percent: float
    window_duration_mins: int
    resets_at: int

    @classmethod
    def from_window(cls, window: RateLimitWindow) -> UsageWindow:
        return cls(
            used_percent=window.used_percent,
            window_duration_mins=window.window_duration_mins,
            resets_at=window.resets_at,
        )


class UsageLimits(BaseModel):
    primary: UsageWindow | None = None
    secondary: UsageWindow | None = None
    plan_type: PlanType = PlanType.UNKNOWN


class CodexUsage(BaseModel):
    rate_limits: UsageLimits = Field(default_factory=UsageLimits)
    last_updated: datetime


def normalize_plan_type(value: str | None) -> PlanType | None:
    """Map a raw plan string onto a known :class:`PlanType`, if any."""
    if not value:
        return None
    try:
        plan = PlanType(value.lower())
    except ValueError:
        return None
    return None if plan is PlanType.UNKNOWN else plan


def default_auth_file() -> Path:
    codex_home = os.environ.get(CODEX_HOME_ENV)
    base = Path(codex_home) if codex_home else Path.home() / ".codex"
    return base.expanduser() / "auth.json"


def decode_jwt_claims(token: str) -> dict[str, Any] | None:
    """Decode a JWT payload without verifying it. ``None`` if malformed."""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    payload = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(payload).decode("utf-8"))
    except ValueError:
        return None
    return claims if isinstance(claims, dict) else None


class UsageService:
    """Resolve plan type and rate-limit windows for the current user."""

    def __init__(
        self,
        app_server: AppServerService,
        *,
        auth_file: Path | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._app_server = app_server
        self._auth_file = auth_file or default_auth_file()
        self._clock = clock

    def is_available(self) -> bool:
        return self._app_server.is_available()

    async def fetch_usage(self) -> CodexUsage:
        """Fetch usage, falling back from app-server to auth file to unknown.

        Raises:
            CliNotFoundError: The Codex CLI is not installed.
        """
        if not self._app_server.is_available():
            raise CliNotFoundError()

        usage = await self._fetch_from_app_server()
        if usage is not None:
            return usage

        logger.info("App-server usage unavailable, trying auth file fallback")
        plan_type = self.plan_type_from_auth_file()
        return CodexUsage(rate_limits=UsageLimits(plan_type=plan_type), last_updated=self._clock())

    async def _fetch_from_app_server(self) -> CodexUsage | None:
        account_result, limits_result = await asyncio.gather(
            self._app_server.get_account(),
            self._app_server.get_rate_limits(),
            return_exceptions=True,
        )

        if isinstance(account_result, BaseException):
            if not isinstance(account_result, (RpcError, CliNotFoundError)):
                raise account_result
            logger.warning("account/read failed: %s", account_result)
            return None

        limits: RateLimitSnapshot | None = None
        if isinstance(limits_result, BaseException):
            if not isinstance(limits_result, (RpcError, CliNotFoundError)):
                raise limits_result
            logger.warning("account/rateLimits/read failed: %s", limits_result)
        else:
            limits = limits_result

        usage = CodexUsage(
            rate_limits=UsageLimits(
                primary=UsageWindow.from_window(limits.primary) if limits and limits.primary else None,
                secondary=UsageWindow.from_window(limits.secondary)
                if limits and limits.secondary
                else None,
                plan_type=self._resolve_plan_type(account_result, limits),
            ),
            last_updated=self._clock(),
        )
        logger.info("Fetched usage from app-server (plan: %s)", usage.rate_limits.plan_type.value)
        return usage

    @staticmethod
    def _resolve_plan_type(account: AccountState, limits: RateLimitSnapshot | None) -> PlanType:
        # Rate limits carry the current plan; the account record can lag behind.
        plan = normalize_plan_type(limits.plan_type if limits else None)
        if plan is None and account.account is not None:
            plan = normalize_plan_type(account.account.plan_type)
        return plan or PlanType.UNKNOWN

    def plan_type_from_auth_file(self) -> PlanType:
        """Read the plan type from the auth file's ``id_token`` claims."""
        try:
            data = json.loads(self._auth_file.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.info("Auth file %s does not exist", self._auth_file)
            return PlanType.UNKNOWN
        except (OSError, ValueError) as exc:
            logger.warning("Failed to read auth file %s: %s", self._auth_file, exc)
            return PlanType.UNKNOWN

        tokens = data.get("tokens") if isinstance(data, dict) else None
        id_token = tokens.get("id_token") if isinstance(tokens, dict) else None
        if not isinstance(id_token, str):
            logger.info("No id_token in auth file")
            return PlanType.UNKNOWN

        claims = decode_jwt_claims(id_token)
        if claims is None:
            logger.info("Failed to parse id_token")
            return PlanType.UNKNOWN

        account_type, expired = self._plan_from_claims(claims)
        if expired and account_type and account_type.lower() != PlanType.FREE.value:
            logger.info("Subscription expired, using 'free' instead of %r", account_type)
            return PlanType.FREE
        return normalize_plan_type(account_type) or PlanType.UNKNOWN

    def _plan_from_claims(self, claims: dict[str, Any]) -> tuple[str | None, bool]:
        openai_auth = claims.get(OPENAI_AUTH_CLAIM)
        if isinstance(openai_auth, dict):
            plan = openai_auth.get("chatgpt_plan_type")
            active_until = openai_auth.get("chatgpt_subscription_active_until")
            return (
                plan if isinstance(plan, str) else None,
                isinstance(active_until, str) and self._is_past(active_until),
            )

        for name in _FALLBACK_PLAN_CLAIMS:
            value = claims.get(name)
            if isinstance(value, str) and value:
                return value, False
        return None, False

    def _is_past(self, timestamp: str) -> bool:
        try:
            moment = datetime.fromisoformat(timestamp)
        except ValueError:
            return False
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment < self._clock()
