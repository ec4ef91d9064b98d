"""Database-backed progress and enrollment lookups."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Set, Tuple

from sqlalchemy import select

from ..db.models import EnrollmentModel, ProgressRecordModel
from .sql_base import SqlRepository


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SqlProgressStore(SqlRepository):
    source_name = "progress_store"

    def _course_ids(self, learner_id: str, *, completed: bool) -> Set[str]:
        stmt = select(ProgressRecordModel.course_id).where(
            ProgressRecordModel.learner_id == learner_id,
            ProgressRecordModel.is_completed.is_(completed),
        )
        with self._read() as session:
            return set(session.execute(stmt).scalars().all())

    def find_completed(self, learner_id: str) -> Set[str]:
        return self._course_ids(learner_id, completed=True)

    def find_in_progress(self, learner_id: str) -> Set[str]:
        return self._course_ids(learner_id, completed=False)

    def find_learners_with_completions(
        self, course_ids: Iterable[str], exclude_learner_id: str
    ) -> Dict[str, Set[str]]:
        wanted = sorted(set(course_ids))
        if not wanted:
            return {}
        stmt = select(ProgressRecordModel.learner_id, ProgressRecordModel.course_id).where(
            ProgressRecordModel.course_id.in_(wanted),
            ProgressRecordModel.is_completed.is_(True),
            ProgressRecordModel.learner_id != exclude_learner_id,
        )
        overlap: Dict[str, Set[str]] = defaultdict(set)
        with self._read() as session:
            for learner_id, course_id in session.execute(stmt).all():
                overlap[learner_id].add(course_id)
        return dict(overlap)

    def find_completed_by_learners(self, learner_ids: Iterable[str]) -> Dict[str, Set[str]]:
        wanted = sorted(set(learner_ids))
        if not wanted:
            return {}
        stmt = select(ProgressRecordModel.learner_id, ProgressRecordModel.course_id).where(
            ProgressRecordModel.learner_id.in_(wanted),
            ProgressRecordModel.is_completed.is_(True),
        )
        completed: Dict[str, Set[str]] = defaultdict(set)
        with self._read() as session:
            for learner_id, course_id in session.execute(stmt).all():
                completed[learner_id].add(course_id)
        return dict(completed)


class SqlEnrollmentStore(SqlRepository):
    source_name = "enrollment_store"

    def find_recent(self, since: datetime) -> List[Tuple[str, datetime]]:
        stmt = select(EnrollmentModel.course_id, EnrollmentModel.enrolled_at).where(
            EnrollmentModel.is_active.is_(True),
            EnrollmentModel.enrolled_at >= since,
        )
        with self._read() as session:
            return [(course_id, _as_utc(enrolled_at)) for course_id, enrolled_at in session.execute(stmt).all()]


__all__ = ["SqlEnrollmentStore", "SqlProgressStore"]
