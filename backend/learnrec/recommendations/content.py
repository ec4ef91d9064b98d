"""Attribute-based signals: content similarity and "more like this"."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List

from ..constants import (
    CATEGORY_MATCH_WEIGHT,
    CONTENT_RATING_WEIGHT,
    LEVEL_MATCH_WEIGHT,
    MAX_CONTENT_CANDIDATES,
    SCORE_PRECISION,
    SIMILAR_LEVEL_WEIGHT,
    SIMILAR_RATING_WEIGHT,
    SIMILAR_TAG_WEIGHT,
    SOURCE_CONTENT,
    TAG_MATCH_WEIGHT,
)
from ..models import CourseSummary, RecommendationCandidate, SimilarCourse
from ..repositories.interfaces import CatalogFilter, CourseCatalog
from .ranking import top_candidates


@dataclass(frozen=True)
class ContentProfile:
    """Categories, levels and tags pooled from the courses a learner touched."""

    categories: FrozenSet[str]
    levels: FrozenSet[str]
    tags: FrozenSet[str]

    @classmethod
    def from_courses(cls, courses: Iterable[CourseSummary]) -> "ContentProfile":
        courses = list(courses)
        return cls(
            categories=frozenset(course.category_id for course in courses),
            levels=frozenset(course.level for course in courses),
            tags=frozenset(tag for course in courses for tag in course.tags),
        )

    @property
    def is_empty(self) -> bool:
        return not (self.categories or self.levels or self.tags)


def content_match_score(course: CourseSummary, profile: ContentProfile) -> float:
    score = 0.0
    if course.category_id in profile.categories:
        score += CATEGORY_MATCH_WEIGHT
    if course.level in profile.levels:
        score += LEVEL_MATCH_WEIGHT
    score += TAG_MATCH_WEIGHT * len(course.tags & profile.tags)
    score += CONTENT_RATING_WEIGHT * course.rating
    return score


def _shares_attribute(course: CourseSummary, profile: ContentProfile) -> bool:
    return (
        course.category_id in profile.categories
        or course.level in profile.levels
        or bool(course.tags & profile.tags)
    )


class ContentSimilarityRecommender:
    source = SOURCE_CONTENT

    def __init__(self, catalog: CourseCatalog, *, max_candidates: int = MAX_CONTENT_CANDIDATES) -> None:
        self._catalog = catalog
        self._max_candidates = max_candidates

    def recommend(
        self,
        source_course_ids: Iterable[str],
        excluded_course_ids: Iterable[str],
    ) -> List[RecommendationCandidate]:
        source_ids = set(source_course_ids)
        if not source_ids:
            return []
        profile = ContentProfile.from_courses(self._catalog.find_by_ids(source_ids))
        if profile.is_empty:
            return []

        excluded = set(excluded_course_ids) | source_ids
        candidates: List[RecommendationCandidate] = []
        for course in self._catalog.find_published():
            if course.id in excluded or not course.is_recommendable:
                continue
            # A course with no shared attribute is not similar, whatever its rating.
            if not _shares_attribute(course, profile):
                continue
            score = content_match_score(course, profile)
            if score <= 0:
                continue
            candidates.append(
                RecommendationCandidate(course_id=course.id, raw_score=score, source=self.source, course=course)
            )
        return top_candidates(candidates, self._max_candidates)


def similar_course_score(course: CourseSummary, reference: CourseSummary) -> float:
    score = SIMILAR_LEVEL_WEIGHT if course.level == reference.level else 0.0
    score += SIMILAR_TAG_WEIGHT * len(course.tags & reference.tags)
    score += SIMILAR_RATING_WEIGHT * course.rating
    return score


class SimilarCourseFinder:
    """Finds "more like this" neighbours: same-category courses near a reference course."""

    def __init__(self, catalog: CourseCatalog) -> None:
        self._catalog = catalog

    def find(self, course_id: str, limit: int) -> List[SimilarCourse]:
        matches = self._catalog.find_by_ids([course_id])
        if not matches or limit <= 0:
            return []
        reference = matches[0]

        neighbours = self._catalog.find_published(CatalogFilter.for_categories([reference.category_id]))
        scored = [
            (similar_course_score(course, reference), course)
            for course in neighbours
            if course.id != reference.id and course.is_recommendable
        ]
        scored.sort(key=lambda entry: (-entry[0], entry[1].id))
        return [
            SimilarCourse(course=course, score=round(score, SCORE_PRECISION))
            for score, course in scored[:limit]
        ]


__all__ = [
    "ContentProfile",
    "ContentSimilarityRecommender",
    "SimilarCourseFinder",
    "content_match_score",
    "similar_course_score",
]
