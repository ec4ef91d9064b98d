"""Typed records exchanged between the repositories and the recommenders."""

from __future__ import annotations

import math
from typing import FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


def _clean_strings(values: object) -> FrozenSet[str]:
    if values is None:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    cleaned = set()
    for value in values:  # type: ignore[union-attr]
        if value is None:
            continue
        text = str(value).strip()
        if text:
            cleaned.add(text)
    return frozenset(cleaned)


def _require_finite(value: float) -> float:
    if not math.isfinite(value):
        raise ValueError("Scores must be finite.")
    return value


class CourseSummary(_Record):
    """Catalog projection used for scoring and for denormalized display fields."""

    id: str = Field(..., min_length=1)
    title: str = ""
    description: str = ""
    category_id: str = Field(..., min_length=1)
    category_name: Optional[str] = None
    level: str = "beginner"
    tags: FrozenSet[str] = Field(default_factory=frozenset)
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    total_enrollments: int = Field(default=0, ge=0)
    total_reviews: int = Field(default=0, ge=0)
    price: float = Field(default=0.0, ge=0.0)
    thumbnail: Optional[str] = None
    is_published: bool = True
    is_deleted: bool = False

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, value: object) -> FrozenSet[str]:
        return _clean_strings(value)

    @property
    def is_recommendable(self) -> bool:
        return self.is_published and not self.is_deleted


class LearnerProfile(_Record):
    """Read-only snapshot of a learner's history and declared interests."""

    id: str = Field(..., min_length=1)
    completed_course_ids: FrozenSet[str] = Field(default_factory=frozenset)
    in_progress_course_ids: FrozenSet[str] = Field(default_factory=frozenset)
    interests: FrozenSet[str] = Field(default_factory=frozenset)

    @field_validator("completed_course_ids", "in_progress_course_ids", "interests", mode="before")
    @classmethod
    def normalize_sets(cls, value: object) -> FrozenSet[str]:
        return _clean_strings(value)

    @property
    def excluded_course_ids(self) -> FrozenSet[str]:
        return self.completed_course_ids | self.in_progress_course_ids


class SimilarLearner(_Record):
    learner_id: str
    shared_course_count: int = Field(..., ge=1)
    similarity: float = Field(..., ge=0.0)


class RecommendationCandidate(_Record):
    """A single source's proposal for one course."""

    course_id: str
    raw_score: float = Field(..., ge=0.0)
    source: str
    course: CourseSummary

    @field_validator("raw_score")
    @classmethod
    def check_finite(cls, value: float) -> float:
        return _require_finite(value)


class AggregatedRecommendation(_Record):
    """Final ranked entry returned to callers."""

    course_id: str
    final_score: float = Field(..., ge=0.0)
    contributing_source_count: int = Field(..., ge=1)
    sources: Tuple[str, ...] = ()
    course: CourseSummary

    @field_validator("final_score")
    @classmethod
    def check_finite(cls, value: float) -> float:
        return _require_finite(value)


class SimilarCourse(_Record):
    course: CourseSummary
    score: float = Field(..., ge=0.0)

    @field_validator("score")
    @classmethod
    def check_finite(cls, value: float) -> float:
        return _require_finite(value)


class LearningPathSummary(_Record):
    id: str = Field(..., min_length=1)
    title: str = ""
    description: str = ""
    course_ids: Tuple[str, ...] = ()
    is_published: bool = True
    is_deleted: bool = False


class RecommendedLearningPath(_Record):
    path: LearningPathSummary
    score: float = Field(..., ge=0.0)
    completed_course_count: int = Field(default=0, ge=0)


__all__ = [
    "AggregatedRecommendation",
    "CourseSummary",
    "LearnerProfile",
    "LearningPathSummary",
    "RecommendationCandidate",
    "RecommendedLearningPath",
    "SimilarCourse",
    "SimilarLearner",
]
