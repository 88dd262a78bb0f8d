"""Services built on the app-server client."""

from codexlink.services.app_server import AppServerService
from codexlink.services.model_cache import CodexModel, ModelCacheService, ModelTier
from codexlink.services.usage import CodexUsage, PlanType, UsageLimits, UsageService, UsageWindow

__all__ = [
    "AppServerService",
    "CodexModel",
    "CodexUsage",
    "ModelCacheService",
    "ModelTier",
    "PlanType",
    "UsageLimits",
    "UsageService",
    "UsageWindow",
]
