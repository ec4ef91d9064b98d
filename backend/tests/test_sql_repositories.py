"""SQL repositories and the snapshot loader against SQLite."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from learnrec.config import Settings
from learnrec.db import Base, build_engine, build_session_factory, session_scope
from learnrec.db.models import EnrollmentModel, LearnerProfileModel
from learnrec.errors import DataSourceUnavailable
from learnrec.models import CourseSummary, LearningPathSummary
from learnrec.recommendations import RecommendationEngine
from learnrec.repositories import CatalogFilter, database_repositories
from learnrec.repositories.snapshot import (
    CatalogSnapshot,
    CategoryRecord,
    EnrollmentRecord,
    LearnerRecord,
    ProgressRecord,
)
from scripts.load_snapshot import load_snapshot

NOW = datetime.now(timezone.utc)


def _course(course_id: str, **fields) -> CourseSummary:
    fields.setdefault("category_id", "cat-data")
    return CourseSummary(id=course_id, title=course_id.upper(), **fields)


def _snapshot() -> CatalogSnapshot:
    return CatalogSnapshot(
        categories=[
            CategoryRecord(id="cat-data", name="Data Science"),
            CategoryRecord(id="cat-web", name="Web"),
            CategoryRecord(id="cat-old", name="Legacy", is_active=False),
        ],
        courses=[
            _course("x", tags=["python"], rating=4.0, price=19.99),
            _course("y", tags=["python"], rating=4.0),
            _course("z", tags=["sql"], rating=3.5),
            _course("p", tags=["python", "ml"], rating=4.5, total_enrollments=300),
            _course("w1", category_id="cat-web", tags=["javascript"], rating=4.8, total_enrollments=800),
            _course("draft", is_published=False),
            _course("gone", is_deleted=True),
        ],
        progress=[
            *[ProgressRecord(learner_id="alice", course_id=cid, is_completed=True) for cid in ("x", "y", "z")],
            ProgressRecord(learner_id="alice", course_id="w1", progress_percent=25),
            *[ProgressRecord(learner_id="bob", course_id=cid, is_completed=True) for cid in ("x", "y", "z", "p")],
        ],
        enrollments=[
            EnrollmentRecord(learner_id="bob", course_id="p", enrolled_at=NOW - timedelta(days=2)),
            EnrollmentRecord(learner_id="carol", course_id="w1", enrolled_at=NOW - timedelta(days=1)),
            EnrollmentRecord(learner_id="carol", course_id="x", enrolled_at=NOW - timedelta(days=60)),
            EnrollmentRecord(learner_id="dave", course_id="y", enrolled_at=NOW, is_active=False),
        ],
        learners=[
            LearnerRecord(id="alice", interests=["Web", " "]),
            LearnerRecord(id="bob"),
        ],
        learning_paths=[
            LearningPathSummary(id="path-data", title="Data", course_ids=("x", "p", "y")),
            LearningPathSummary(id="path-hidden", title="Hidden", course_ids=("x",), is_published=False),
        ],
    )


@pytest.fixture
def session_factory(tmp_path):
    engine = build_engine(Settings(database_url=f"sqlite:///{tmp_path / 'learnrec.sqlite'}"))
    Base.metadata.create_all(engine)
    factory = build_session_factory(engine)
    with session_scope(factory=factory) as session:
        load_snapshot(_snapshot(), session)
    yield factory
    engine.dispose()


def test_catalog_only_returns_published_courses(session_factory) -> None:
    catalog = database_repositories(session_factory).catalog

    published = {course.id: course for course in catalog.find_published()}

    assert set(published) == {"x", "y", "z", "p", "w1"}
    assert published["x"].category_name == "Data Science"
    assert published["x"].price == pytest.approx(19.99)
    assert published["p"].tags == frozenset({"python", "ml"})


def test_catalog_filters_and_lookups(session_factory) -> None:
    catalog = database_repositories(session_factory).catalog

    assert {course.id for course in catalog.find_published(CatalogFilter.for_categories({"cat-web"}))} == {"w1"}
    assert {course.id for course in catalog.find_published(CatalogFilter.for_courses({"x", "draft"}))} == {"x"}
    assert catalog.find_published(CatalogFilter.for_courses(set())) == []
    assert {course.id for course in catalog.find_by_ids({"draft", "x", "missing"})} == {"draft", "x"}
    assert catalog.find_category_ids({"Web", "Legacy", "Nope"}) == {"cat-web"}


def test_progress_queries(session_factory) -> None:
    progress = database_repositories(session_factory).progress

    assert progress.find_completed("alice") == {"x", "y", "z"}
    assert progress.find_in_progress("alice") == {"w1"}
    assert progress.find_learners_with_completions({"x", "y", "p"}, exclude_learner_id="alice") == {
        "bob": {"x", "y", "p"}
    }
    assert progress.find_completed_by_learners(["bob", "ghost"]) == {"bob": {"x", "y", "z", "p"}}


def test_recent_enrollments_are_active_and_timezone_aware(session_factory) -> None:
    enrollments = database_repositories(session_factory).enrollments

    recent = enrollments.find_recent(NOW - timedelta(days=30))

    assert sorted(course_id for course_id, _ in recent) == ["p", "w1"]
    assert all(enrolled_at.tzinfo is not None for _, enrolled_at in recent)


def test_profile_interests(session_factory) -> None:
    profiles = database_repositories(session_factory).profiles
    with session_scope(factory=session_factory) as session:
        session.add(LearnerProfileModel(id="instructor-1", role="instructor", interests=["Web"]))

    assert profiles.find_interests("alice") == {"Web"}
    assert profiles.find_interests("bob") == set()
    assert profiles.find_interests("instructor-1") == set()
    assert profiles.find_interests("ghost") is None


def test_learning_paths_keep_course_order(session_factory) -> None:
    paths = database_repositories(session_factory).learning_paths.find_published()

    assert [(path.id, path.course_ids) for path in paths] == [("path-data", ("x", "p", "y"))]


def test_reloading_a_snapshot_is_idempotent(session_factory) -> None:
    with session_scope(factory=session_factory) as session:
        counts = load_snapshot(_snapshot(), session)

    repositories = database_repositories(session_factory)
    assert counts["courses"] == 7
    assert counts["enrollments"] == 4
    with session_scope(factory=session_factory) as session:
        assert session.query(EnrollmentModel).count() == 4
    recent = repositories.enrollments.find_recent(NOW - timedelta(days=30))
    assert sorted(course_id for course_id, _ in recent) == ["p", "w1"]
    assert repositories.progress.find_completed("alice") == {"x", "y", "z"}
    assert repositories.learning_paths.find_published()[0].course_ids == ("x", "p", "y")


def test_reload_deactivates_an_existing_enrollment(session_factory) -> None:
    snapshot = _snapshot()
    snapshot.enrollments[0] = snapshot.enrollments[0].model_copy(update={"is_active": False})
    with session_scope(factory=session_factory) as session:
        load_snapshot(snapshot, session)

    recent = database_repositories(session_factory).enrollments.find_recent(NOW - timedelta(days=30))

    assert [course_id for course_id, _ in recent] == ["w1"]


def test_reload_keeps_stored_role_unless_snapshot_sets_one(session_factory) -> None:
    with session_scope(factory=session_factory) as session:
        session.add(LearnerProfileModel(id="instructor-1", role="instructor", interests=[]))

    snapshot = _snapshot()
    snapshot.learners.append(LearnerRecord(id="instructor-1", interests=["Web"]))
    with session_scope(factory=session_factory) as session:
        load_snapshot(snapshot, session)
    profiles = database_repositories(session_factory).profiles
    assert profiles.find_interests("instructor-1") == set()

    snapshot.learners[-1] = LearnerRecord(id="instructor-1", interests=["Web"], role="student")
    with session_scope(factory=session_factory) as session:
        load_snapshot(snapshot, session)
    assert profiles.find_interests("instructor-1") == {"Web"}


def test_missing_tables_surface_as_data_source_unavailable(tmp_path) -> None:
    engine = build_engine(Settings(database_url=f"sqlite:///{tmp_path / 'empty.sqlite'}"))
    repositories = database_repositories(build_session_factory(engine))

    with pytest.raises(DataSourceUnavailable) as excinfo:
        repositories.catalog.find_published()
    assert excinfo.value.source == "course_catalog"
    with pytest.raises(DataSourceUnavailable):
        repositories.progress.find_completed("alice")
    engine.dispose()


def test_engine_runs_against_the_database(session_factory) -> None:
    engine = RecommendationEngine(database_repositories(session_factory))

    items = asyncio.run(engine.get_personalized_recommendations("alice", 5))

    assert items
    assert items[0].course_id == "p"
    assert not {"x", "y", "z", "w1"} & {item.course_id for item in items}
