"""Peer-based (collaborative) recommendation signals."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Sequence, Set

from ..constants import (
    COLLABORATIVE_COUNT_NORMALIZER,
    MAX_COLLABORATIVE_CANDIDATES,
    MAX_SIMILAR_LEARNERS,
    MIN_SHARED_COMPLETIONS,
    SOURCE_COLLABORATIVE,
)
from ..models import RecommendationCandidate, SimilarLearner
from ..repositories.interfaces import CatalogFilter, CourseCatalog, ProgressStore
from .ranking import top_candidates

logger = logging.getLogger(__name__)


class SimilarLearnerFinder:
    """Finds learners whose completions overlap the target learner's.

    A peer qualifies once it shares at least ``min(3, |C|)`` completed courses
    with the learner, where ``C`` is the learner's completed set; similarity is
    the shared fraction of ``C``.
    """

    def __init__(
        self,
        progress: ProgressStore,
        *,
        max_peers: int = MAX_SIMILAR_LEARNERS,
        min_shared: int = MIN_SHARED_COMPLETIONS,
    ) -> None:
        self._progress = progress
        self._max_peers = max_peers
        self._min_shared = min_shared

    def find(self, learner_id: str, completed_course_ids: Iterable[str]) -> List[SimilarLearner]:
        completed = set(completed_course_ids)
        if not completed:
            return []

        threshold = min(self._min_shared, len(completed))
        overlap = self._progress.find_learners_with_completions(completed, exclude_learner_id=learner_id)

        peers: List[SimilarLearner] = []
        for peer_id, shared_courses in overlap.items():
            if peer_id == learner_id:
                continue
            shared = len(set(shared_courses) & completed)
            if shared < threshold:
                continue
            peers.append(
                SimilarLearner(
                    learner_id=peer_id,
                    shared_course_count=shared,
                    similarity=shared / len(completed),
                )
            )

        peers.sort(key=lambda peer: (-peer.similarity, peer.learner_id))
        logger.debug("Found %d similar learners for %s (threshold=%d)", len(peers), learner_id, threshold)
        return peers[: self._max_peers]


class CollaborativeRecommender:
    """Scores the courses similar learners completed.

    ``score = (n / peers) * (n / 10)`` where ``n`` is how many of the similar
    learners completed the course.
    """

    source = SOURCE_COLLABORATIVE

    def __init__(
        self,
        progress: ProgressStore,
        catalog: CourseCatalog,
        *,
        max_candidates: int = MAX_COLLABORATIVE_CANDIDATES,
    ) -> None:
        self._progress = progress
        self._catalog = catalog
        self._max_candidates = max_candidates

    def recommend(
        self,
        similar_learners: Sequence[SimilarLearner],
        excluded_course_ids: Iterable[str],
    ) -> List[RecommendationCandidate]:
        if not similar_learners:
            return []

        excluded = set(excluded_course_ids)
        peer_ids = [peer.learner_id for peer in similar_learners]
        completions = self._progress.find_completed_by_learners(peer_ids)

        takers: Dict[str, Set[str]] = defaultdict(set)
        for peer_id in peer_ids:
            for course_id in completions.get(peer_id, ()):
                if course_id not in excluded:
                    takers[course_id].add(peer_id)
        if not takers:
            return []

        courses = {
            course.id: course
            for course in self._catalog.find_published(CatalogFilter.for_courses(takers))
        }
        peer_count = len(peer_ids)
        candidates: List[RecommendationCandidate] = []
        for course_id, learners in takers.items():
            course = courses.get(course_id)
            if course is None or not course.is_recommendable:
                continue
            count = len(learners)
            candidates.append(
                RecommendationCandidate(
                    course_id=course_id,
                    raw_score=(count / peer_count) * (count / COLLABORATIVE_COUNT_NORMALIZER),
                    source=self.source,
                    course=course,
                )
            )
        return top_candidates(candidates, self._max_candidates)


__all__ = ["CollaborativeRecommender", "SimilarLearnerFinder"]
