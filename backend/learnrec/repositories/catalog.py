"""Database-backed course catalog."""

from __future__ import annotations

from typing import Iterable, List, Optional, Set

from sqlalchemy import select

from ..db.models import CategoryModel, CourseModel
from ..models import CourseSummary
from .interfaces import CatalogFilter
from .sql_base import SqlRepository


def _to_summary(course: CourseModel, category_name: Optional[str]) -> CourseSummary:
    return CourseSummary(
        id=course.id,
        title=course.title,
        description=course.description or "",
        category_id=course.category_id,
        category_name=category_name,
        level=course.level,
        tags=list(course.tags or []),
        rating=max(0.0, min(5.0, float(course.rating or 0.0))),
        total_enrollments=max(0, course.total_enrollments or 0),
        total_reviews=max(0, course.total_reviews or 0),
        price=max(0.0, float(course.price or 0.0)),
        thumbnail=course.thumbnail,
        is_published=course.is_published,
        is_deleted=course.is_deleted,
    )


class SqlCourseCatalog(SqlRepository):
    source_name = "course_catalog"

    def find_published(self, catalog_filter: Optional[CatalogFilter] = None) -> List[CourseSummary]:
        catalog_filter = catalog_filter or CatalogFilter()
        if catalog_filter.course_ids is not None and not catalog_filter.course_ids:
            return []
        if catalog_filter.category_ids is not None and not catalog_filter.category_ids:
            return []

        stmt = (
            select(CourseModel, CategoryModel.name)
            .join(CategoryModel, CourseModel.category_id == CategoryModel.id)
            .where(CourseModel.is_published.is_(True), CourseModel.is_deleted.is_(False))
        )
        if catalog_filter.course_ids is not None:
            stmt = stmt.where(CourseModel.id.in_(sorted(catalog_filter.course_ids)))
        if catalog_filter.category_ids is not None:
            stmt = stmt.where(CourseModel.category_id.in_(sorted(catalog_filter.category_ids)))

        with self._read() as session:
            rows = session.execute(stmt).all()
            return [_to_summary(course, category_name) for course, category_name in rows]

    def find_by_ids(self, course_ids: Iterable[str]) -> List[CourseSummary]:
        wanted = sorted(set(course_ids))
        if not wanted:
            return []
        stmt = (
            select(CourseModel, CategoryModel.name)
            .join(CategoryModel, CourseModel.category_id == CategoryModel.id)
            .where(CourseModel.id.in_(wanted))
        )
        with self._read() as session:
            rows = session.execute(stmt).all()
            return [_to_summary(course, category_name) for course, category_name in rows]

    def find_category_ids(self, names: Iterable[str]) -> Set[str]:
        wanted = sorted({name for name in names if name})
        if not wanted:
            return set()
        stmt = select(CategoryModel.id).where(
            CategoryModel.name.in_(wanted),
            CategoryModel.is_active.is_(True),
            CategoryModel.is_deleted.is_(False),
        )
        with self._read() as session:
            return set(session.execute(stmt).scalars().all())


__all__ = ["SqlCourseCatalog"]
