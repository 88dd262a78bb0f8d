"""Static model registry data.

Contains the known Codex model profiles and helpers to build a pre-loaded
``CapabilityRegistry``. All ids carry the ``codex-`` prefix so they never
collide with model ids from other CLI providers.
"""

from functools import lru_cache

from codexlink.registry.capabilities import CapabilityRegistry, ModelCapability

# ---------------------------------------------------------------------------
# Known model profiles
# ---------------------------------------------------------------------------

KNOWN_MODELS: tuple[ModelCapability, ...] = (
    ModelCapability(
        id="codex-gpt-5.2-codex",
        label="GPT-5.2-Codex",
        description="Most advanced agentic coding model for complex software engineering",
        has_thinking=True,
        supports_vision=True,
    ),
    ModelCapability(
        id="codex-gpt-5.1-codex-max",
        label="GPT-5.1-Codex-Max",
        description="Optimized for long-horizon, agentic coding tasks in Codex",
        has_thinking=True,
        supports_vision=True,
    ),
    ModelCapability(
        id="codex-gpt-5.1-codex-mini",
        label="GPT-5.1-Codex-Mini",
        description="Smaller, more cost-effective version for faster workflows",
        has_thinking=False,
        supports_vision=True,
    ),
    ModelCapability(
        id="codex-gpt-5.2",
        label="GPT-5.2 (Codex)",
        description="Best general agentic model for tasks across industries and domains via Codex",
        has_thinking=True,
        supports_vision=True,
    ),
    ModelCapability(
        id="codex-gpt-5.1",
        label="GPT-5.1 (Codex)",
        description="Great for coding and agentic tasks across domains via Codex",
        has_thinking=True,
        supports_vision=True,
    ),
)


def build_default_registry() -> CapabilityRegistry:
    """Return a new ``CapabilityRegistry`` pre-loaded with known models."""
    return CapabilityRegistry(KNOWN_MODELS)


@lru_cache(maxsize=1)
def default_registry() -> CapabilityRegistry:
    """Return the process-wide default registry, built on first use."""
    return build_default_registry()
