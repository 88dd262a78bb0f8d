"""codexlink — authentication probing and app-server RPC for the Codex CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from codexlink.auth.prober import AuthProber as AuthProber
    from codexlink.auth.prober import check_authentication as check_authentication
    from codexlink.protocols.appserver.client import AppServerClient as AppServerClient
    from codexlink.registry.capabilities import CapabilityRegistry as CapabilityRegistry

_LAZY_EXPORTS = {
    "AuthProber": "codexlink.auth.prober",
    "check_authentication": "codexlink.auth.prober",
    "AppServerClient": "codexlink.protocols.appserver.client",
    "CapabilityRegistry": "codexlink.registry.capabilities",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'codexlink' has no attribute {name!r}")
