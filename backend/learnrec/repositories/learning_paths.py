"""Database-backed learning path lookups."""

from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from ..db.models import LearningPathModel
from ..models import LearningPathSummary
from .sql_base import SqlRepository


class SqlLearningPathStore(SqlRepository):
    source_name = "learning_path_store"

    def find_published(self) -> List[LearningPathSummary]:
        stmt = (
            select(LearningPathModel)
            .options(selectinload(LearningPathModel.courses))
            .where(LearningPathModel.is_published.is_(True), LearningPathModel.is_deleted.is_(False))
        )
        with self._read() as session:
            paths = session.execute(stmt).scalars().all()
            return [
                LearningPathSummary(
                    id=path.id,
                    title=path.title,
                    description=path.description or "",
                    course_ids=tuple(entry.course_id for entry in path.courses),
                    is_published=path.is_published,
                    is_deleted=path.is_deleted,
                )
                for path in paths
            ]


__all__ = ["SqlLearningPathStore"]
