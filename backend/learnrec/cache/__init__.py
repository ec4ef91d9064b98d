"""Recommendation caches and the settings-driven factory that picks one."""

from __future__ import annotations

from typing import Optional

from ..config import Settings
from .recommendation_cache import (
    InMemoryRecommendationCache,
    RecommendationCache,
    RedisRecommendationCache,
    recommendation_cache_key,
)


def build_cache(settings: Settings) -> Optional[RecommendationCache]:
    if not settings.cache_enabled:
        return None
    if settings.redis_url:
        return RedisRecommendationCache.from_url(settings.redis_url)
    return InMemoryRecommendationCache()


__all__ = [
    "InMemoryRecommendationCache",
    "RecommendationCache",
    "RedisRecommendationCache",
    "build_cache",
    "recommendation_cache_key",
]
