"""Peer discovery and collaborative scoring."""

from __future__ import annotations

import pytest

from learnrec.models import SimilarLearner
from learnrec.recommendations.peers import CollaborativeRecommender, SimilarLearnerFinder
from learnrec.repositories.snapshot import (
    CatalogSnapshot,
    ProgressRecord,
    SnapshotCourseCatalog,
    SnapshotProgressStore,
)


def _completions(mapping: dict[str, list[str]]) -> CatalogSnapshot:
    return CatalogSnapshot(
        progress=[
            ProgressRecord(learner_id=learner_id, course_id=course_id, is_completed=True)
            for learner_id, course_ids in mapping.items()
            for course_id in course_ids
        ]
    )


def test_learners_with_identical_history_are_fully_similar() -> None:
    store = SnapshotProgressStore(_completions({"a": ["x", "y", "z"], "b": ["x", "y", "z"]}))

    peers = SimilarLearnerFinder(store).find("a", {"x", "y", "z"})

    assert [peer.learner_id for peer in peers] == ["b"]
    assert peers[0].similarity == 1.0
    assert peers[0].shared_course_count == 3


def test_no_completed_courses_means_no_peers() -> None:
    store = SnapshotProgressStore(_completions({"b": ["x", "y", "z"]}))

    assert SimilarLearnerFinder(store).find("a", set()) == []


def test_threshold_shrinks_for_short_histories() -> None:
    store = SnapshotProgressStore(
        _completions({"a": ["x", "y"], "b": ["x"], "c": ["x", "y", "w"]})
    )

    peers = SimilarLearnerFinder(store).find("a", {"x", "y"})

    assert [peer.learner_id for peer in peers] == ["c"]
    assert peers[0].similarity == 1.0


def test_peers_need_three_shared_courses_and_rank_by_similarity() -> None:
    history = ["c1", "c2", "c3", "c4", "c5"]
    store = SnapshotProgressStore(
        _completions(
            {
                "a": history,
                "b": ["c1", "c2"],
                "c": ["c1", "c2", "c3"],
                "d": ["c1", "c2", "c3", "c4", "other"],
            }
        )
    )

    peers = SimilarLearnerFinder(store).find("a", set(history))

    assert [peer.learner_id for peer in peers] == ["d", "c"]
    assert peers[0].similarity == pytest.approx(0.8)
    assert peers[1].similarity == pytest.approx(0.6)


def test_peer_list_is_capped_and_ties_break_by_learner_id() -> None:
    mapping = {f"peer-{index:02d}": ["x", "y", "z"] for index in range(12)}
    mapping["a"] = ["x", "y", "z"]
    store = SnapshotProgressStore(_completions(mapping))

    peers = SimilarLearnerFinder(store).find("a", {"x", "y", "z"})

    assert len(peers) == 10
    assert [peer.learner_id for peer in peers] == [f"peer-{index:02d}" for index in range(10)]


def _peer(learner_id: str) -> SimilarLearner:
    return SimilarLearner(learner_id=learner_id, shared_course_count=3, similarity=1.0)


def _collaborative_fixture(make_course):
    snapshot = _completions(
        {
            "b": ["x", "y", "z", "p", "q", "hidden"],
            "c": ["x", "y", "z", "p"],
        }
    )
    snapshot.courses.extend(
        [
            make_course("p"),
            make_course("q"),
            make_course("x"),
            make_course("y"),
            make_course("z"),
            make_course("hidden", is_published=False),
        ]
    )
    return CollaborativeRecommender(SnapshotProgressStore(snapshot), SnapshotCourseCatalog(snapshot))


def test_collaborative_scores_by_peer_share(make_course) -> None:
    recommender = _collaborative_fixture(make_course)

    candidates = recommender.recommend([_peer("b"), _peer("c")], {"x", "y", "z"})

    assert [candidate.course_id for candidate in candidates] == ["p", "q"]
    assert candidates[0].raw_score == pytest.approx(0.2)
    assert candidates[1].raw_score == pytest.approx(0.05)
    assert all(candidate.source == "collaborative" for candidate in candidates)


def test_collaborative_respects_exclusion_set(make_course) -> None:
    recommender = _collaborative_fixture(make_course)

    candidates = recommender.recommend([_peer("b"), _peer("c")], {"x", "y", "z", "q"})

    assert [candidate.course_id for candidate in candidates] == ["p"]


def test_collaborative_without_peers_is_empty(make_course) -> None:
    recommender = _collaborative_fixture(make_course)

    assert recommender.recommend([], {"x"}) == []
