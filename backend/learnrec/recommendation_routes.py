"""Recommendation REST endpoints."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from .api_models import (
    LearningPathPayload,
    RecommendationListPayload,
    RecommendationPayload,
    SimilarCoursePayload,
)
from .constants import (
    DEFAULT_LEARNING_PATH_LIMIT,
    DEFAULT_RECOMMENDATION_LIMIT,
    DEFAULT_SIMILAR_COURSE_LIMIT,
)
from .dependencies import get_recommendation_engine
from .errors import RecommendationTimeout
from .recommendations import RecommendationEngine, normalize_limit

router = APIRouter(prefix="/api/recommendations", tags=["recommendations"])
logger = logging.getLogger(__name__)

MAX_IDENTIFIER_LENGTH = 64


def _require_identifier(value: str, label: str) -> str:
    normalized = value.strip()
    if not normalized or len(normalized) > MAX_IDENTIFIER_LENGTH:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid {label}.")
    return normalized


@router.get("/learners/{learner_id}", response_model=RecommendationListPayload)
async def personalized_recommendations(
    learner_id: str,
    limit: Optional[str] = Query(default=None),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
) -> RecommendationListPayload:
    learner_id = _require_identifier(learner_id, "learner id")
    resolved_limit = normalize_limit(limit, DEFAULT_RECOMMENDATION_LIMIT)
    try:
        batch = await engine.recommend(learner_id, resolved_limit)
    except RecommendationTimeout as exc:
        logger.warning("Recommendations for %s timed out after %.1fs", learner_id, exc.timeout)
        return RecommendationListPayload(
            learner_id=learner_id,
            limit=resolved_limit,
            degraded=True,
            generated_at=datetime.now(timezone.utc),
        )
    return RecommendationListPayload(
        learner_id=batch.learner_id,
        limit=batch.limit,
        cached=batch.cached,
        degraded=batch.degraded,
        generated_at=batch.generated_at,
        items=[RecommendationPayload.from_recommendation(item) for item in batch.items],
    )


@router.get("/courses/{course_id}/similar", response_model=List[SimilarCoursePayload])
async def similar_courses(
    course_id: str,
    limit: Optional[str] = Query(default=None),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
) -> List[SimilarCoursePayload]:
    course_id = _require_identifier(course_id, "course id")
    try:
        matches = await engine.get_more_like_this(
            course_id, normalize_limit(limit, DEFAULT_SIMILAR_COURSE_LIMIT)
        )
    except RecommendationTimeout:
        logger.warning("Similar course lookup for %s timed out", course_id)
        return []
    return [SimilarCoursePayload.from_similar(match) for match in matches]


@router.get("/learners/{learner_id}/learning-paths", response_model=List[LearningPathPayload])
async def learning_paths(
    learner_id: str,
    limit: Optional[str] = Query(default=None),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
) -> List[LearningPathPayload]:
    learner_id = _require_identifier(learner_id, "learner id")
    try:
        paths = await engine.get_recommended_learning_paths(
            learner_id, normalize_limit(limit, DEFAULT_LEARNING_PATH_LIMIT)
        )
    except RecommendationTimeout:
        logger.warning("Learning path lookup for %s timed out", learner_id)
        return []
    return [LearningPathPayload.from_recommendation(path) for path in paths]


@router.delete("/learners/{learner_id}/cache", status_code=status.HTTP_204_NO_CONTENT)
def invalidate_cache(
    learner_id: str,
    engine: RecommendationEngine = Depends(get_recommendation_engine),
) -> Response:
    learner_id = _require_identifier(learner_id, "learner id")
    engine.invalidate_learner(learner_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
