"""ModelCacheService — TTL cache of app-server models, persisted to disk.

Features:

- configurable TTL (one hour by default)
- atomic writes (temp file + ``os.replace``)
- concurrent refreshes share a single in-flight request
- stale cache served when a refresh fails; otherwise the error propagates
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import time
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ValidationError

from codexlink.protocols.appserver.schema import ModelDescriptor
from codexlink.protocols.errors import RpcError
from codexlink.registry.capabilities import CapabilityRegistry
from codexlink.registry.registry_data import default_registry
from codexlink.runtime.errors import CliNotFoundError
from codexlink.services.app_server import AppServerService

logger = logging.getLogger(__name__)

CACHE_FILE_NAME = "codex-models-cache.json"
MODEL_ID_PREFIX = "codex-"
DEFAULT_TTL = 3600.0


class ModelTier(str, Enum):
    PREMIUM = "premium"
    STANDARD = "standard"
    BASIC = "basic"


class CodexModel(BaseModel):
    """A model in the shape model pickers consume."""

    id: str
    label: str
    description: str
    has_thinking: bool
    supports_vision: bool
    tier: ModelTier
    is_default: bool


class ModelCacheFile(BaseModel):
    """On-disk cache layout. Timestamps and TTL are in seconds."""

    models: list[CodexModel]
    cached_at: float
    ttl: float


def infer_tier(model_id: str) -> ModelTier:
    if "max" in model_id or "gpt-5.2-codex" in model_id:
        return ModelTier.PREMIUM
    if "mini" in model_id:
        return ModelTier.BASIC
    return ModelTier.STANDARD


class ModelCacheService:
    """Serve Codex models from a disk cache, refreshing from the app-server."""

    def __init__(
        self,
        cache_dir: Path,
        app_server: AppServerService,
        *,
        ttl: float = DEFAULT_TTL,
        registry: CapabilityRegistry | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._cache_path = Path(cache_dir) / CACHE_FILE_NAME
        self._app_server = app_server
        self._ttl = ttl
        self._registry = registry or default_registry()
        self._clock = clock
        self._in_flight: asyncio.Task[list[CodexModel]] | None = None

    @property
    def cache_path(self) -> Path:
        return self._cache_path

    async def get_models(self, force_refresh: bool = False) -> list[CodexModel]:
        """Return cached models while fresh, otherwise refresh.

        Raises:
            RpcError: The refresh failed and there is no cache to fall back on.
            CliNotFoundError: The CLI is missing and there is no cache.
        """
        cached = self._load()
        if cached is not None and not force_refresh:
            age = self._clock() - cached.cached_at
            if age <= cached.ttl:
                logger.info(
                    "Using cached models (%d models, age: %dmin)", len(cached.models), age // 60
                )
                return cached.models

        try:
            return await self.refresh_models()
        except (RpcError, CliNotFoundError) as exc:
            if cached is None:
                raise
            logger.warning("Model refresh failed (%s); serving stale cache", exc)
            return cached.models

    async def get_models_with_metadata(
        self, force_refresh: bool = False
    ) -> tuple[list[CodexModel], float]:
        """Return the models and the timestamp of the cache they came from."""
        models = await self.get_models(force_refresh)
        cached = self._load()
        cached_at = cached.cached_at if cached is not None else self._clock()
        return models, cached_at

    async def refresh_models(self) -> list[CodexModel]:
        """Fetch fresh models and rewrite the cache.

        Concurrent callers await the same refresh.
        """
        task = self._in_flight
        if task is None:
            task = asyncio.create_task(self._do_refresh())
            task.add_done_callback(self._clear_in_flight)
            self._in_flight = task
        return await asyncio.shield(task)

    def clear_cache(self) -> None:
        logger.info("Clearing model cache at %s", self._cache_path)
        try:
            self._cache_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.error("Failed to clear model cache: %s", exc)

    # -- internals ----------------------------------------------------------

    def _clear_in_flight(self, task: asyncio.Task[list[CodexModel]]) -> None:
        if self._in_flight is task:
            self._in_flight = None

    async def _do_refresh(self) -> list[CodexModel]:
        descriptors = await self._app_server.get_models()
        models = [self._transform(d) for d in descriptors]
        self._save(models)
        logger.info("Fetched fresh models (%d models)", len(models))
        return models

    def _transform(self, descriptor: ModelDescriptor) -> CodexModel:
        model_id = f"{MODEL_ID_PREFIX}{descriptor.id}"
        return CodexModel(
            id=model_id,
            label=descriptor.display_name,
            description=descriptor.description,
            has_thinking=len(descriptor.supported_reasoning_efforts) > 0,
            supports_vision=self._registry.supports_vision(model_id),
            tier=infer_tier(descriptor.id),
            is_default=descriptor.is_default,
        )

    def _load(self) -> ModelCacheFile | None:
        try:
            raw = self._cache_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Failed to read model cache: %s", exc)
            return None

        try:
            return ModelCacheFile.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as exc:
            logger.warning("Invalid model cache structure, ignoring: %s", exc)
            return None

    def _save(self, models: list[CodexModel]) -> None:
        cache = ModelCacheFile(models=models, cached_at=self._clock(), ttl=self._ttl)
        tmp_path: str | None = None
        try:
            self._cache_path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._cache_path.parent,
                prefix=f"{CACHE_FILE_NAME}.",
                suffix=".tmp",
                delete=False,
            ) as fh:
                tmp_path = fh.name
                fh.write(cache.model_dump_json(indent=2))
            os.replace(tmp_path, self._cache_path)
        except OSError as exc:
            logger.error("Failed to save model cache: %s", exc)
            if tmp_path is not None:
                Path(tmp_path).unlink(missing_ok=True)
