"""Result payloads of the app-server methods codexlink consumes.

Wire names are camelCase; attributes are snake_case. Models accept either
on input and serialize back to camelCase with ``by_alias=True``. Unknown
members are ignored so newer CLI versions can add fields freely.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictBool
from pydantic.alias_generators import to_camel

METHOD_INITIALIZE = "initialize"
METHOD_INITIALIZED = "initialized"
METHOD_MODEL_LIST = "model/list"
METHOD_ACCOUNT_READ = "account/read"
METHOD_RATE_LIMITS_READ = "account/rateLimits/read"


class WireModel(BaseModel):
    """Base for immutable camelCase wire payloads."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# model/list
# ---------------------------------------------------------------------------


class ReasoningEffortOption(WireModel):
    """One reasoning tier a model supports."""

    reasoning_effort: str
    description: str


class ModelDescriptor(WireModel):
    """A model available to the authenticated user."""

    id: str
    model: str
    display_name: str
    description: str
    supported_reasoning_efforts: tuple[ReasoningEffortOption, ...]
    default_reasoning_effort: str
    is_default: StrictBool


class ModelListPage(WireModel):
    """One page of ``model/list``. ``next_cursor=None`` marks the last page."""

    data: tuple[ModelDescriptor, ...]
    next_cursor: str | None = None


# ---------------------------------------------------------------------------
# account/read
# ---------------------------------------------------------------------------


class AccountType(str, Enum):
    API_KEY = "apiKey"
    CHATGPT = "chatgpt"


class Account(WireModel):
    type: AccountType
    email: str | None = None
    plan_type: str | None = None


class AccountState(WireModel):
    """Current authentication state as reported by the app-server."""

    account: Account | None = None
    requires_openai_auth: StrictBool


# ---------------------------------------------------------------------------
# account/rateLimits/read
# ---------------------------------------------------------------------------


class RateLimitWindow(WireModel):
    used_percent: float = Field(ge=0, le=100)
    window_duration_mins: int = Field(gt=0)
    resets_at: int = Field(description="Unix epoch seconds.")


class RateLimitSnapshot(WireModel):
    primary: RateLimitWindow | None = None
    secondary: RateLimitWindow | None = None
    plan_type: str | None = None


class RateLimitsResponse(WireModel):
    """Envelope of ``account/rateLimits/read``; the snapshot sits under ``rateLimits``."""

    rate_limits: RateLimitSnapshot


METHOD_RESULT_TYPES: dict[str, type[BaseModel]] = {
    METHOD_MODEL_LIST: ModelListPage,
    METHOD_ACCOUNT_READ: AccountState,
    METHOD_RATE_LIMITS_READ: RateLimitsResponse,
}
