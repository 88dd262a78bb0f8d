"""Classification of ``codex login status`` output.

The CLI does not promise a stable output format, and it prints its status
line to stdout or stderr depending on version and platform. Everything that
depends on that wording lives here so new phrasings (or locales) can be
added without touching the prober's control flow.
"""

from __future__ import annotations

from collections.abc import Iterable

from codexlink.runtime.process.models import ExecutionOutcome

LOGGED_IN_PHRASES: tuple[str, ...] = ("logged in",)


def merged_output(outcome: ExecutionOutcome) -> str:
    """Return stdout followed by stderr, lower-cased."""
    return (outcome.stdout + outcome.stderr).lower()


def is_logged_in(
    outcome: ExecutionOutcome,
    phrases: Iterable[str] = LOGGED_IN_PHRASES,
) -> bool:
    """Return ``True`` only for a zero exit *and* a recognised phrase.

    A zero exit alone is not enough: the CLI can exit 0 while printing an
    advisory instead of a status.
    """
    if outcome.exit_code != 0:
        return False
    text = merged_output(outcome)
    return any(phrase.lower() in text for phrase in phrases)
