"""Import a JSON catalog snapshot into the recommendation database."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import timezone
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

from learnrec.db.base import Base
from learnrec.db.models import (
    CategoryModel,
    CourseModel,
    EnrollmentModel,
    LearnerProfileModel,
    LearningPathCourseModel,
    LearningPathModel,
    ProgressRecordModel,
)
from learnrec.db.session import get_engine, session_scope
from learnrec.repositories.snapshot import CatalogSnapshot


logger = logging.getLogger("load_snapshot")


def _ensure_database() -> None:
    Base.metadata.create_all(get_engine())


def _ensure_learner(session: Session, learner_id: str) -> None:
    if session.get(LearnerProfileModel, learner_id) is None:
        session.add(LearnerProfileModel(id=learner_id, interests=[]))


def load_snapshot(snapshot: CatalogSnapshot, session: Session) -> dict[str, int]:
    """Upsert every record in ``snapshot``; returns per-table counts."""
    counts = {"categories": 0, "courses": 0, "learners": 0, "progress": 0, "enrollments": 0, "learning_paths": 0}

    for category in snapshot.categories:
        session.merge(CategoryModel(id=category.id, name=category.name, is_active=category.is_active))
        counts["categories"] += 1
    known_categories = {category.id for category in snapshot.categories}
    for course in snapshot.courses:
        if course.category_id not in known_categories:
            session.merge(CategoryModel(id=course.category_id, name=course.category_name or course.category_id))
            known_categories.add(course.category_id)
    session.flush()

    for course in snapshot.courses:
        session.merge(
            CourseModel(
                id=course.id,
                title=course.title,
                description=course.description,
                category_id=course.category_id,
                level=course.level,
                thumbnail=course.thumbnail,
                price=course.price,
                rating=course.rating,
                total_enrollments=course.total_enrollments,
                total_reviews=course.total_reviews,
                tags=sorted(course.tags),
                is_published=course.is_published,
                is_deleted=course.is_deleted,
            )
        )
        counts["courses"] += 1
    session.flush()

    for learner in snapshot.learners:
        profile = session.get(LearnerProfileModel, learner.id)
        if profile is None:
            profile = LearnerProfileModel(id=learner.id, role=learner.role or "student")
            session.add(profile)
        elif learner.role is not None:
            profile.role = learner.role
        profile.interests = list(learner.interests)
        counts["learners"] += 1
    session.flush()

    for record in snapshot.progress:
        _ensure_learner(session, record.learner_id)
        session.flush()
        existing = (
            session.query(ProgressRecordModel)
            .filter_by(learner_id=record.learner_id, course_id=record.course_id)
            .one_or_none()
        )
        if existing is None:
            existing = ProgressRecordModel(learner_id=record.learner_id, course_id=record.course_id)
            session.add(existing)
        existing.is_completed = record.is_completed
        existing.progress_percent = record.progress_percent
        counts["progress"] += 1

    for enrollment in snapshot.enrollments:
        _ensure_learner(session, enrollment.learner_id)
        enrolled_at = enrollment.enrolled_at.astimezone(timezone.utc)
        existing_enrollment = (
            session.query(EnrollmentModel)
            .filter_by(learner_id=enrollment.learner_id, course_id=enrollment.course_id, enrolled_at=enrolled_at)
            .one_or_none()
        )
        if existing_enrollment is None:
            existing_enrollment = EnrollmentModel(
                learner_id=enrollment.learner_id,
                course_id=enrollment.course_id,
                enrolled_at=enrolled_at,
            )
            session.add(existing_enrollment)
        existing_enrollment.is_active = enrollment.is_active
        counts["enrollments"] += 1

    for path in snapshot.learning_paths:
        model = session.get(LearningPathModel, path.id)
        if model is None:
            model = LearningPathModel(id=path.id, title=path.title)
            session.add(model)
        model.title = path.title
        model.description = path.description
        model.is_published = path.is_published
        model.is_deleted = path.is_deleted
        # Orphans must be deleted before the replacement rows hit the unique constraint.
        model.courses.clear()
        session.flush()
        model.courses = [
            LearningPathCourseModel(course_id=course_id, position=position)
            for position, course_id in enumerate(dict.fromkeys(path.course_ids))
        ]
        counts["learning_paths"] += 1

    return counts


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Load a catalog snapshot JSON file into the database.")
    parser.add_argument("snapshot", type=Path, help="Path to the snapshot JSON document.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    if not args.snapshot.exists():
        logger.error("Snapshot not found at %s", args.snapshot)
        return 1

    snapshot = CatalogSnapshot.from_path(args.snapshot)
    _ensure_database()
    with session_scope() as session:
        counts = load_snapshot(snapshot, session)
    logger.info("Snapshot import complete: %s", counts)
    return 0


if __name__ == "__main__":
    sys.exit(main())
