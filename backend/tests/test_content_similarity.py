from __future__ import annotations

import pytest

from learnrec.recommendations.content import ContentSimilarityRecommender, SimilarCourseFinder
from learnrec.repositories.snapshot import CatalogSnapshot, SnapshotCourseCatalog


def _catalog(*courses) -> SnapshotCourseCatalog:
    return SnapshotCourseCatalog(CatalogSnapshot(courses=list(courses)))


def test_category_and_level_match_without_tags(make_course) -> None:
    catalog = _catalog(
        make_course("done", tags=["python"]),
        make_course("candidate", tags=["sql"], rating=4.0),
    )

    candidates = ContentSimilarityRecommender(catalog).recommend({"done"}, {"done"})

    assert [candidate.course_id for candidate in candidates] == ["candidate"]
    assert candidates[0].raw_score == pytest.approx(4.4)
    assert candidates[0].source == "content_similarity"


def test_tag_overlap_counts_half_a_point_per_tag(make_course) -> None:
    catalog = _catalog(
        make_course("done", tags=["python", "pandas"]),
        make_course(
            "tagged",
            category_id="cat-other",
            level="advanced",
            tags=["python", "pandas", "numpy"],
        ),
    )

    candidates = ContentSimilarityRecommender(catalog).recommend({"done"}, {"done"})

    assert candidates[0].raw_score == pytest.approx(1.0)


def test_courses_without_shared_attributes_are_not_candidates(make_course) -> None:
    catalog = _catalog(
        make_course("done", tags=["python"]),
        make_course("unrelated", category_id="cat-art", level="advanced", tags=["drawing"], rating=5.0),
    )

    assert ContentSimilarityRecommender(catalog).recommend({"done"}, {"done"}) == []


def test_excluded_and_unpublished_courses_are_skipped(make_course) -> None:
    catalog = _catalog(
        make_course("done"),
        make_course("in-progress"),
        make_course("draft", is_published=False),
        make_course("removed", is_deleted=True),
        make_course("open"),
    )

    candidates = ContentSimilarityRecommender(catalog).recommend({"done", "in-progress"}, {"done", "in-progress"})

    assert [candidate.course_id for candidate in candidates] == ["open"]


def test_unpublished_history_still_contributes_attributes(make_course) -> None:
    catalog = _catalog(
        make_course("retired", category_id="cat-web", is_published=False),
        make_course("web-next", category_id="cat-web", level="advanced"),
    )

    candidates = ContentSimilarityRecommender(catalog).recommend({"retired"}, {"retired"})

    assert [candidate.course_id for candidate in candidates] == ["web-next"]
    assert candidates[0].raw_score == pytest.approx(3.0)


def test_no_history_yields_no_content_candidates(make_course) -> None:
    catalog = _catalog(make_course("open", rating=5.0))

    assert ContentSimilarityRecommender(catalog).recommend(set(), set()) == []


def test_content_candidates_are_capped_at_twenty(make_course) -> None:
    courses = [make_course("done")] + [make_course(f"c-{index:02d}") for index in range(25)]

    candidates = ContentSimilarityRecommender(_catalog(*courses)).recommend({"done"}, {"done"})

    assert len(candidates) == 20
    assert candidates[0].course_id == "c-00"


def test_more_like_this_ranks_same_category_neighbours(make_course) -> None:
    catalog = _catalog(
        make_course("ref", tags=["python", "sql"], rating=4.0),
        make_course("a", tags=["python"], rating=3.0),
        make_course("b", level="advanced", tags=["python", "sql"], rating=5.0),
        make_course("c"),
        make_course("d", category_id="cat-web", tags=["python", "sql"], rating=5.0),
        make_course("e", is_published=False, tags=["python", "sql"], rating=5.0),
    )

    matches = SimilarCourseFinder(catalog).find("ref", 5)

    assert [match.course.id for match in matches] == ["a", "b", "c"]
    assert [match.score for match in matches] == [4.5, 4.5, 2.0]


def test_more_like_this_honours_limit_and_unknown_reference(make_course) -> None:
    catalog = _catalog(make_course("ref"), make_course("a"), make_course("b"))
    finder = SimilarCourseFinder(catalog)

    assert [match.course.id for match in finder.find("ref", 1)] == ["a"]
    assert finder.find("missing", 5) == []
