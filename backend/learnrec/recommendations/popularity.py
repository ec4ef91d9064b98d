"""Popularity signals: interest-category popularity and recent trending."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional

from ..constants import (
    POPULARITY_ENROLLMENT_WEIGHT,
    POPULARITY_NORMALIZER,
    POPULARITY_RATING_WEIGHT,
    POPULARITY_REVIEW_WEIGHT,
    SOURCE_INTEREST,
    SOURCE_TRENDING,
    TRENDING_ENROLLMENT_WEIGHT,
    TRENDING_NORMALIZER,
    TRENDING_RATING_WEIGHT,
    TRENDING_WINDOW_DAYS,
)
from ..models import CourseSummary, RecommendationCandidate
from ..repositories.interfaces import CatalogFilter, CourseCatalog, EnrollmentStore
from .ranking import top_candidates

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def popularity_score(course: CourseSummary) -> float:
    popularity = (
        POPULARITY_ENROLLMENT_WEIGHT * course.total_enrollments
        + POPULARITY_RATING_WEIGHT * course.rating
        + POPULARITY_REVIEW_WEIGHT * course.total_reviews
    )
    return popularity / POPULARITY_NORMALIZER


def trending_score(course: CourseSummary, recent_enrollments: int) -> float:
    trend = TRENDING_ENROLLMENT_WEIGHT * recent_enrollments + TRENDING_RATING_WEIGHT * course.rating
    return trend / TRENDING_NORMALIZER


class InterestPopularityRecommender:
    source = SOURCE_INTEREST

    def __init__(self, catalog: CourseCatalog) -> None:
        self._catalog = catalog

    def recommend(self, interests: Iterable[str], limit: int) -> List[RecommendationCandidate]:
        names = {name for name in interests if name}
        if not names or limit <= 0:
            return []
        category_ids = self._catalog.find_category_ids(names)
        if not category_ids:
            return []

        candidates = [
            RecommendationCandidate(
                course_id=course.id,
                raw_score=popularity_score(course),
                source=self.source,
                course=course,
            )
            for course in self._catalog.find_published(CatalogFilter.for_categories(category_ids))
            if course.is_recommendable
        ]
        return top_candidates(candidates, limit)


class TrendingRecommender:
    """Ranks courses by active enrollments within a trailing window."""

    source = SOURCE_TRENDING

    def __init__(
        self,
        enrollments: EnrollmentStore,
        catalog: CourseCatalog,
        *,
        window_days: int = TRENDING_WINDOW_DAYS,
        clock: Optional[Clock] = None,
    ) -> None:
        self._enrollments = enrollments
        self._catalog = catalog
        self._window = timedelta(days=window_days)
        self._clock = clock or _utcnow

    def recommend(self, limit: int) -> List[RecommendationCandidate]:
        if limit <= 0:
            return []
        since = self._clock() - self._window
        recent = Counter(
            course_id
            for course_id, enrolled_at in self._enrollments.find_recent(since)
            if enrolled_at >= since
        )
        if not recent:
            return []

        candidates = [
            RecommendationCandidate(
                course_id=course.id,
                raw_score=trending_score(course, recent[course.id]),
                source=self.source,
                course=course,
            )
            for course in self._catalog.find_published(CatalogFilter.for_courses(recent))
            if course.is_recommendable
        ]
        return top_candidates(candidates, limit)


__all__ = [
    "InterestPopularityRecommender",
    "TrendingRecommender",
    "popularity_score",
    "trending_score",
]
