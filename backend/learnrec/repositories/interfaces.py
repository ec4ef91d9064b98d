"""Read-only collaborator interfaces consumed by the recommendation engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, List, Optional, Protocol, Set, Tuple

from ..models import CourseSummary, LearningPathSummary


@dataclass(frozen=True)
class CatalogFilter:
    """Restricts ``CourseCatalog.find_published`` to course and/or category ids.

    ``None`` means "no restriction"; an empty set matches nothing.
    """

    course_ids: Optional[FrozenSet[str]] = None
    category_ids: Optional[FrozenSet[str]] = None

    @classmethod
    def for_courses(cls, course_ids: Iterable[str]) -> "CatalogFilter":
        return cls(course_ids=frozenset(course_ids))

    @classmethod
    def for_categories(cls, category_ids: Iterable[str]) -> "CatalogFilter":
        return cls(category_ids=frozenset(category_ids))

    def matches(self, course: CourseSummary) -> bool:
        if self.course_ids is not None and course.id not in self.course_ids:
            return False
        if self.category_ids is not None and course.category_id not in self.category_ids:
            return False
        return True


class CourseCatalog(Protocol):
    def find_published(self, catalog_filter: Optional[CatalogFilter] = None) -> List[CourseSummary]:
        """Published, non-deleted courses matching the filter."""
        ...

    def find_by_ids(self, course_ids: Iterable[str]) -> List[CourseSummary]:
        """Courses with the given ids regardless of publication state."""
        ...

    def find_category_ids(self, names: Iterable[str]) -> Set[str]:
        ...


class ProgressStore(Protocol):
    def find_completed(self, learner_id: str) -> Set[str]:
        ...

    def find_in_progress(self, learner_id: str) -> Set[str]:
        ...

    def find_learners_with_completions(
        self, course_ids: Iterable[str], exclude_learner_id: str
    ) -> Dict[str, Set[str]]:
        """Map other learners to the subset of ``course_ids`` they completed."""
        ...

    def find_completed_by_learners(self, learner_ids: Iterable[str]) -> Dict[str, Set[str]]:
        ...


class EnrollmentStore(Protocol):
    def find_recent(self, since: datetime) -> List[Tuple[str, datetime]]:
        """Active enrollments at or after ``since`` as ``(course_id, enrolled_at)``."""
        ...


class ProfileStore(Protocol):
    def find_interests(self, learner_id: str) -> Optional[Set[str]]:
        """Interest category names, or ``None`` when the learner does not exist."""
        ...


class LearningPathStore(Protocol):
    def find_published(self) -> List[LearningPathSummary]:
        ...


__all__ = [
    "CatalogFilter",
    "CourseCatalog",
    "EnrollmentStore",
    "LearningPathStore",
    "ProfileStore",
    "ProgressStore",
]
