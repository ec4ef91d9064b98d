"""Database-backed learner interest lookups."""

from __future__ import annotations

from typing import Optional, Set

from sqlalchemy import select

from ..db.models import LearnerProfileModel
from .sql_base import SqlRepository


class SqlProfileStore(SqlRepository):
    source_name = "profile_store"

    def find_interests(self, learner_id: str) -> Optional[Set[str]]:
        stmt = select(LearnerProfileModel.role, LearnerProfileModel.interests).where(
            LearnerProfileModel.id == learner_id
        )
        with self._read() as session:
            row = session.execute(stmt).one_or_none()
        if row is None:
            return None
        role, interests = row
        if role != "student":
            # Only student profiles declare interests.
            return set()
        return {interest.strip() for interest in interests or [] if isinstance(interest, str) and interest.strip()}


__all__ = ["SqlProfileStore"]
