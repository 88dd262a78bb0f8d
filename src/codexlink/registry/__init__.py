"""Model capability registry."""

from codexlink.registry.capabilities import CapabilityRegistry, ModelCapability
from codexlink.registry.registry_data import (
    KNOWN_MODELS,
    build_default_registry,
    default_registry,
)

__all__ = [
    "KNOWN_MODELS",
    "CapabilityRegistry",
    "ModelCapability",
    "build_default_registry",
    "default_registry",
]
