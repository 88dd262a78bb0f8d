"""Authentication result types."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class AuthMethod(str, Enum):
    """How a confirmed session is believed to be authenticated."""

    API_KEY_ENV = "api_key_env"
    CLI_AUTHENTICATED = "cli_authenticated"
    NONE = "none"


class AuthCheckResult(BaseModel):
    """Outcome of a single authentication probe.

    ``method`` is derived from ``authenticated``: build instances through
    :meth:`unauthenticated` or :meth:`confirmed` rather than by hand.
    """

    model_config = ConfigDict(frozen=True)

    authenticated: bool
    method: AuthMethod

    @model_validator(mode="after")
    def _check_method(self) -> AuthCheckResult:
        if self.authenticated == (self.method is AuthMethod.NONE):
            msg = f"authenticated={self.authenticated} is inconsistent with method={self.method.value}"
            raise ValueError(msg)
        return self

    @classmethod
    def unauthenticated(cls) -> AuthCheckResult:
        return cls(authenticated=False, method=AuthMethod.NONE)

    @classmethod
    def confirmed(cls, *, api_key_in_env: bool) -> AuthCheckResult:
        """A confirmed session, labelled by whether an API key was in the env.

        The label is best-effort: the CLI does not report which credential
        it actually uses.
        """
        method = AuthMethod.API_KEY_ENV if api_key_in_env else AuthMethod.CLI_AUTHENTICATED
        return cls(authenticated=True, method=method)
