"""Pydantic payloads returned by the recommendation HTTP API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .models import (
    AggregatedRecommendation,
    CourseSummary,
    RecommendedLearningPath,
    SimilarCourse,
)


class CoursePayload(BaseModel):
    course_id: str
    title: str
    thumbnail: Optional[str] = None
    price: float = 0.0
    rating: float = 0.0
    level: str
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @classmethod
    def from_course(cls, course: CourseSummary, **extra: object) -> "CoursePayload":
        return cls(
            course_id=course.id,
            title=course.title,
            thumbnail=course.thumbnail,
            price=course.price,
            rating=course.rating,
            level=course.level,
            category=course.category_name or course.category_id,
            tags=sorted(course.tags),
            **extra,
        )


class RecommendationPayload(CoursePayload):
    score: float
    source_count: int
    sources: List[str] = Field(default_factory=list)

    @classmethod
    def from_recommendation(cls, item: AggregatedRecommendation) -> "RecommendationPayload":
        return cls.from_course(  # type: ignore[return-value]
            item.course,
            score=item.final_score,
            source_count=item.contributing_source_count,
            sources=list(item.sources),
        )


class RecommendationListPayload(BaseModel):
    learner_id: str
    limit: int
    cached: bool = False
    degraded: bool = False
    generated_at: datetime
    items: List[RecommendationPayload] = Field(default_factory=list)


class SimilarCoursePayload(CoursePayload):
    similarity: float

    @classmethod
    def from_similar(cls, item: SimilarCourse) -> "SimilarCoursePayload":
        return cls.from_course(item.course, similarity=item.score)  # type: ignore[return-value]


class LearningPathPayload(BaseModel):
    path_id: str
    title: str
    description: str = ""
    course_ids: List[str] = Field(default_factory=list)
    score: float
    completed_course_count: int = 0

    @classmethod
    def from_recommendation(cls, item: RecommendedLearningPath) -> "LearningPathPayload":
        return cls(
            path_id=item.path.id,
            title=item.path.title,
            description=item.path.description,
            course_ids=list(item.path.course_ids),
            score=item.score,
            completed_course_count=item.completed_course_count,
        )


__all__ = [
    "CoursePayload",
    "LearningPathPayload",
    "RecommendationListPayload",
    "RecommendationPayload",
    "SimilarCoursePayload",
]
