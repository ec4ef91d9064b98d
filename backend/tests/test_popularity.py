from __future__ import annotations

from datetime import timedelta

import pytest

from learnrec.recommendations.popularity import InterestPopularityRecommender, TrendingRecommender
from learnrec.repositories.snapshot import (
    CatalogSnapshot,
    CategoryRecord,
    EnrollmentRecord,
    SnapshotCourseCatalog,
    SnapshotEnrollmentStore,
)


def _interest_catalog(make_course) -> SnapshotCourseCatalog:
    snapshot = CatalogSnapshot(
        categories=[
            CategoryRecord(id="cat-data", name="Data Science"),
            CategoryRecord(id="cat-web", name="Web"),
            CategoryRecord(id="cat-old", name="Legacy", is_active=False),
        ],
        courses=[
            make_course("d1", total_enrollments=100, rating=4.0, total_reviews=50),
            make_course("d2", total_enrollments=20, rating=5.0),
            make_course("d3", is_published=False, total_enrollments=1000),
            make_course("w1", category_id="cat-web", category_name="Web", total_enrollments=500),
            make_course("l1", category_id="cat-old", category_name="Legacy", total_enrollments=500),
        ],
    )
    return SnapshotCourseCatalog(snapshot)


def test_interest_popularity_scores_courses_in_interest_categories(make_course) -> None:
    recommender = InterestPopularityRecommender(_interest_catalog(make_course))

    candidates = recommender.recommend({"Data Science"}, 10)

    assert [candidate.course_id for candidate in candidates] == ["d1", "d2"]
    assert candidates[0].raw_score == pytest.approx(0.95)
    assert candidates[1].raw_score == pytest.approx(0.6)
    assert candidates[0].source == "interest_popularity"


def test_interest_popularity_limit_and_missing_interests(make_course) -> None:
    recommender = InterestPopularityRecommender(_interest_catalog(make_course))

    assert [candidate.course_id for candidate in recommender.recommend({"Data Science"}, 1)] == ["d1"]
    assert recommender.recommend(set(), 10) == []
    assert recommender.recommend({"Underwater Basket Weaving"}, 10) == []
    assert recommender.recommend({"Legacy"}, 10) == []


def _trending(make_course, now, current=None) -> TrendingRecommender:
    snapshot = CatalogSnapshot(
        courses=[
            make_course("t1", rating=4.0),
            make_course("t2", rating=5.0),
            make_course("t3", rating=5.0),
            make_course("t4", rating=5.0, is_deleted=True),
        ],
        enrollments=[
            EnrollmentRecord(learner_id="l1", course_id="t1", enrolled_at=now - timedelta(days=1)),
            EnrollmentRecord(learner_id="l2", course_id="t1", enrolled_at=now - timedelta(days=5)),
            EnrollmentRecord(learner_id="l3", course_id="t1", enrolled_at=now - timedelta(days=29)),
            EnrollmentRecord(learner_id="l1", course_id="t2", enrolled_at=now - timedelta(hours=3)),
            EnrollmentRecord(learner_id="l1", course_id="t3", enrolled_at=now - timedelta(days=40)),
            EnrollmentRecord(learner_id="l2", course_id="t3", enrolled_at=now, is_active=False),
            EnrollmentRecord(learner_id="l2", course_id="t4", enrolled_at=now),
        ],
    )
    return TrendingRecommender(
        SnapshotEnrollmentStore(snapshot),
        SnapshotCourseCatalog(snapshot),
        clock=lambda: current or now,
    )


def test_trending_counts_active_enrollments_inside_window(make_course, now) -> None:
    candidates = _trending(make_course, now).recommend(10)

    assert [candidate.course_id for candidate in candidates] == ["t2", "t1"]
    assert candidates[0].raw_score == pytest.approx(0.27)
    assert candidates[1].raw_score == pytest.approx(0.26)
    assert all(candidate.source == "trending" for candidate in candidates)


def test_trending_limit(make_course, now) -> None:
    assert [candidate.course_id for candidate in _trending(make_course, now).recommend(1)] == ["t2"]
    assert _trending(make_course, now).recommend(0) == []


def test_trending_with_no_recent_activity_is_empty(make_course, now) -> None:
    recommender = _trending(make_course, now, current=now + timedelta(days=90))

    assert recommender.recommend(10) == []
