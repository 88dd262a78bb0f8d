"""Authentication probing for the Codex CLI."""

from codexlink.auth.classifier import LOGGED_IN_PHRASES, is_logged_in, merged_output
from codexlink.auth.models import AuthCheckResult, AuthMethod
from codexlink.auth.prober import AuthProber, check_authentication

__all__ = [
    "LOGGED_IN_PHRASES",
    "AuthCheckResult",
    "AuthMethod",
    "AuthProber",
    "check_authentication",
    "is_logged_in",
    "merged_output",
]
