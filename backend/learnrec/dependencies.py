"""Process-wide engine wiring shared by the FastAPI app and its routers."""

from __future__ import annotations

import logging
from typing import Optional

from .cache import build_cache
from .config import get_settings
from .recommendations import RecommendationEngine
from .repositories import repositories_from_settings

logger = logging.getLogger(__name__)

_engine: Optional[RecommendationEngine] = None


def create_recommendation_engine() -> RecommendationEngine:
    settings = get_settings()
    cache = build_cache(settings)
    logger.info(
        "Recommendation engine using %s backend (cache=%s)",
        settings.data_backend,
        type(cache).__name__ if cache is not None else "disabled",
    )
    return RecommendationEngine.from_settings(settings, repositories_from_settings(settings), cache)


def get_recommendation_engine() -> RecommendationEngine:
    global _engine
    if _engine is None:
        _engine = create_recommendation_engine()
    return _engine


def reset_recommendation_engine() -> None:
    global _engine
    _engine = None


__all__ = [
    "create_recommendation_engine",
    "get_recommendation_engine",
    "reset_recommendation_engine",
]
