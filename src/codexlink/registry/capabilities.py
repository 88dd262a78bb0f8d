"""Capability lookup for Codex models.

Provides a structured, immutable profile of each known model and a
registry that maps model identifiers to those profiles. The registry is
built once from a fixed table and is read-only afterwards; tests and
callers can construct their own from any iterable of entries.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from pydantic import BaseModel, ConfigDict


class ModelCapability(BaseModel):
    """Declared capabilities and display metadata for one model."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    description: str = ""
    has_thinking: bool = False
    supports_vision: bool = True


class CapabilityRegistry:
    """Maps model identifiers to their capability profiles.

    Unknown ids fall back asymmetrically: :meth:`has_thinking` returns
    ``False`` and :meth:`supports_vision` returns ``True``.
    """

    def __init__(self, entries: Iterable[ModelCapability] = ()) -> None:
        models: dict[str, ModelCapability] = {}
        for entry in entries:
            if entry.id in models:
                msg = f"Duplicate model id in capability registry: {entry.id}"
                raise ValueError(msg)
            models[entry.id] = entry
        self._models = models

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._models

    def __len__(self) -> int:
        return len(self._models)

    def __iter__(self) -> Iterator[ModelCapability]:
        return iter(self._models.values())

    def lookup(self, model_id: str) -> ModelCapability | None:
        """Return the profile for *model_id*, or ``None`` if unknown."""
        return self._models.get(model_id)

    def has_thinking(self, model_id: str) -> bool:
        entry = self._models.get(model_id)
        return entry.has_thinking if entry is not None else False

    def supports_vision(self, model_id: str) -> bool:
        entry = self._models.get(model_id)
        return entry.supports_vision if entry is not None else True

    def label_for(self, model_id: str) -> str:
        """Return the display label, or *model_id* itself when unknown."""
        entry = self._models.get(model_id)
        return entry.label if entry is not None else model_id

    def model_ids(self) -> list[str]:
        """Return all registered ids in registration order."""
        return list(self._models)
