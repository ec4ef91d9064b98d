"""JSON snapshot implementations of the read repositories.

A snapshot is a single JSON document holding the catalog, progress records,
enrollments, learner interests and learning paths. It backs local runs
(``LEARNREC_DATA_BACKEND=snapshot``), tests, and ``scripts/load_snapshot.py``.
"""

from __future__ import annotations

import json
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..models import CourseSummary, LearningPathSummary
from .interfaces import CatalogFilter


class CategoryRecord(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    is_active: bool = True


class ProgressRecord(BaseModel):
    learner_id: str = Field(..., min_length=1)
    course_id: str = Field(..., min_length=1)
    is_completed: bool = False
    progress_percent: float = Field(default=0.0, ge=0.0, le=100.0)


class EnrollmentRecord(BaseModel):
    learner_id: str = Field(..., min_length=1)
    course_id: str = Field(..., min_length=1)
    enrolled_at: datetime
    is_active: bool = True

    @field_validator("enrolled_at")
    @classmethod
    def ensure_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class LearnerRecord(BaseModel):
    id: str = Field(..., min_length=1)
    interests: List[str] = Field(default_factory=list)
    # None keeps whatever role the database already holds.
    role: Optional[str] = None


class CatalogSnapshot(BaseModel):
    categories: List[CategoryRecord] = Field(default_factory=list)
    courses: List[CourseSummary] = Field(default_factory=list)
    progress: List[ProgressRecord] = Field(default_factory=list)
    enrollments: List[EnrollmentRecord] = Field(default_factory=list)
    learners: List[LearnerRecord] = Field(default_factory=list)
    learning_paths: List[LearningPathSummary] = Field(default_factory=list)

    @classmethod
    def from_path(cls, path: Path) -> "CatalogSnapshot":
        with path.open(encoding="utf-8") as handle:
            payload = json.load(handle)
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise RuntimeError(f"Invalid catalog snapshot at {path}: {exc}") from exc


class SnapshotCourseCatalog:
    def __init__(self, snapshot: CatalogSnapshot) -> None:
        self._courses: Dict[str, CourseSummary] = {course.id: course for course in snapshot.courses}
        self._category_ids_by_name: Dict[str, str] = {
            category.name: category.id for category in snapshot.categories if category.is_active
        }

    def find_published(self, catalog_filter: Optional[CatalogFilter] = None) -> List[CourseSummary]:
        catalog_filter = catalog_filter or CatalogFilter()
        return [
            course
            for course in self._courses.values()
            if course.is_recommendable and catalog_filter.matches(course)
        ]

    def find_by_ids(self, course_ids: Iterable[str]) -> List[CourseSummary]:
        return [self._courses[course_id] for course_id in set(course_ids) if course_id in self._courses]

    def find_category_ids(self, names: Iterable[str]) -> Set[str]:
        return {self._category_ids_by_name[name] for name in names if name in self._category_ids_by_name}


class SnapshotProgressStore:
    def __init__(self, snapshot: CatalogSnapshot) -> None:
        self._completed: Dict[str, Set[str]] = defaultdict(set)
        self._in_progress: Dict[str, Set[str]] = defaultdict(set)
        for record in snapshot.progress:
            target = self._completed if record.is_completed else self._in_progress
            target[record.learner_id].add(record.course_id)

    def find_completed(self, learner_id: str) -> Set[str]:
        return set(self._completed.get(learner_id, ()))

    def find_in_progress(self, learner_id: str) -> Set[str]:
        return set(self._in_progress.get(learner_id, ()))

    def find_learners_with_completions(
        self, course_ids: Iterable[str], exclude_learner_id: str
    ) -> Dict[str, Set[str]]:
        wanted = set(course_ids)
        overlap: Dict[str, Set[str]] = {}
        for learner_id, completed in self._completed.items():
            if learner_id == exclude_learner_id:
                continue
            shared = completed & wanted
            if shared:
                overlap[learner_id] = shared
        return overlap

    def find_completed_by_learners(self, learner_ids: Iterable[str]) -> Dict[str, Set[str]]:
        return {
            learner_id: set(self._completed[learner_id])
            for learner_id in set(learner_ids)
            if learner_id in self._completed
        }


class SnapshotEnrollmentStore:
    def __init__(self, snapshot: CatalogSnapshot) -> None:
        self._enrollments = [record for record in snapshot.enrollments if record.is_active]

    def find_recent(self, since: datetime) -> List[Tuple[str, datetime]]:
        return [
            (record.course_id, record.enrolled_at)
            for record in self._enrollments
            if record.enrolled_at >= since
        ]


class SnapshotProfileStore:
    def __init__(self, snapshot: CatalogSnapshot) -> None:
        self._interests: Dict[str, Set[str]] = {
            learner.id: (
                {interest for interest in learner.interests if interest.strip()}
                if learner.role in (None, "student")
                else set()
            )
            for learner in snapshot.learners
        }

    def find_interests(self, learner_id: str) -> Optional[Set[str]]:
        interests = self._interests.get(learner_id)
        return set(interests) if interests is not None else None


class SnapshotLearningPathStore:
    def __init__(self, snapshot: CatalogSnapshot) -> None:
        self._paths = [path for path in snapshot.learning_paths if path.is_published and not path.is_deleted]

    def find_published(self) -> List[LearningPathSummary]:
        return list(self._paths)


__all__ = [
    "CatalogSnapshot",
    "CategoryRecord",
    "EnrollmentRecord",
    "LearnerRecord",
    "ProgressRecord",
    "SnapshotCourseCatalog",
    "SnapshotEnrollmentStore",
    "SnapshotLearningPathStore",
    "SnapshotProfileStore",
    "SnapshotProgressStore",
]
