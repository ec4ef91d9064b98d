"""Personalized recommendation orchestration.

The engine loads a learner snapshot, runs the four signal sources
concurrently in worker threads, and merges their candidates. Any single
source may fail or come back empty without failing the request.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from time import perf_counter
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from pydantic import ValidationError

from ..cache import RecommendationCache, recommendation_cache_key
from ..config import Settings
from ..constants import (
    DEFAULT_LEARNING_PATH_LIMIT,
    DEFAULT_RECOMMENDATION_LIMIT,
    DEFAULT_SIMILAR_COURSE_LIMIT,
    MAX_RECOMMENDATION_LIMIT,
    SOURCE_COLLABORATIVE,
    SOURCE_CONTENT,
    SOURCE_INTEREST,
    SOURCE_TRENDING,
)
from ..errors import DataSourceUnavailable, RecommendationTimeout
from ..models import (
    AggregatedRecommendation,
    LearnerProfile,
    RecommendationCandidate,
    RecommendedLearningPath,
    SimilarCourse,
)
from ..repositories import RepositoryBundle
from ..telemetry import emit_event
from .aggregator import ScoreAggregator
from .content import ContentSimilarityRecommender, SimilarCourseFinder
from .learning_paths import LearningPathRecommender
from .peers import CollaborativeRecommender, SimilarLearnerFinder
from .popularity import Clock, InterestPopularityRecommender, TrendingRecommender
from .ranking import normalize_limit

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_CACHE_TTL_SECONDS = 3600


@dataclass(frozen=True)
class RecommendationBatch:
    learner_id: str
    limit: int
    items: List[AggregatedRecommendation]
    cached: bool = False
    degraded_sources: Tuple[str, ...] = ()
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def degraded(self) -> bool:
        return bool(self.degraded_sources)


class RecommendationEngine:
    def __init__(
        self,
        repositories: RepositoryBundle,
        *,
        cache: Optional[RecommendationCache] = None,
        cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        trending_window_days: int = 30,
        aggregator: Optional[ScoreAggregator] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._repos = repositories
        self._cache = cache
        self._cache_ttl = cache_ttl_seconds
        self._timeout = timeout_seconds
        self._aggregator = aggregator or ScoreAggregator()

        self._peer_finder = SimilarLearnerFinder(repositories.progress)
        self._collaborative = CollaborativeRecommender(repositories.progress, repositories.catalog)
        self._content = ContentSimilarityRecommender(repositories.catalog)
        self._interest = InterestPopularityRecommender(repositories.catalog)
        self._trending = TrendingRecommender(
            repositories.enrollments,
            repositories.catalog,
            window_days=trending_window_days,
            clock=clock,
        )
        self._similar_courses = SimilarCourseFinder(repositories.catalog)
        self._learning_paths = LearningPathRecommender(repositories.learning_paths, repositories.progress)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        repositories: RepositoryBundle,
        cache: Optional[RecommendationCache] = None,
    ) -> "RecommendationEngine":
        return cls(
            repositories,
            cache=cache,
            cache_ttl_seconds=settings.cache_ttl_seconds,
            timeout_seconds=settings.recommendation_timeout_seconds,
            trending_window_days=settings.trending_window_days,
        )

    @property
    def cache(self) -> Optional[RecommendationCache]:
        return self._cache

    # Personalized recommendations -------------------------------------------------

    async def get_personalized_recommendations(
        self,
        learner_id: str,
        limit: object = DEFAULT_RECOMMENDATION_LIMIT,
        *,
        timeout: Optional[float] = None,
    ) -> List[AggregatedRecommendation]:
        batch = await self.recommend(learner_id, limit, timeout=timeout)
        return batch.items

    async def recommend(
        self,
        learner_id: str,
        limit: object = DEFAULT_RECOMMENDATION_LIMIT,
        *,
        timeout: Optional[float] = None,
    ) -> RecommendationBatch:
        """Compute (or fetch from cache) the ranked list for ``learner_id``.

        Raises ``RecommendationTimeout`` when the concurrent sources do not
        finish within ``timeout`` seconds; partial results are discarded and
        nothing is cached.
        """
        learner_id = (learner_id or "").strip()
        resolved_limit = normalize_limit(limit, DEFAULT_RECOMMENDATION_LIMIT)
        if not learner_id:
            return RecommendationBatch(learner_id=learner_id, limit=resolved_limit, items=[])

        cache_key = recommendation_cache_key(learner_id, resolved_limit)
        cached_items = self._read_cache(cache_key)
        if cached_items is not None:
            return RecommendationBatch(
                learner_id=learner_id, limit=resolved_limit, items=cached_items, cached=True
            )

        wait_seconds = self._timeout if timeout is None else timeout
        started = perf_counter()
        try:
            items, degraded = await asyncio.wait_for(
                self._compute(learner_id, resolved_limit),
                timeout=wait_seconds,
            )
        except asyncio.TimeoutError:
            emit_event(
                "recommendations_timed_out",
                operation="personalized",
                subject=learner_id,
                timeout=wait_seconds,
            )
            raise RecommendationTimeout(learner_id, wait_seconds) from None

        if items is None:
            logger.info("Learner %s not found; returning no recommendations", learner_id)
            return RecommendationBatch(learner_id=learner_id, limit=resolved_limit, items=[])

        if not degraded:
            self._write_cache(cache_key, items)

        emit_event(
            "recommendations_generated",
            learner_id=learner_id,
            limit=resolved_limit,
            count=len(items),
            degraded_sources=list(degraded),
            duration_ms=round((perf_counter() - started) * 1000, 2),
        )
        return RecommendationBatch(
            learner_id=learner_id,
            limit=resolved_limit,
            items=items,
            degraded_sources=tuple(degraded),
        )

    async def _compute(
        self, learner_id: str, limit: int
    ) -> Tuple[Optional[List[AggregatedRecommendation]], List[str]]:
        profile, degraded = await self._load_learner(learner_id)
        if profile is None:
            return (None if not degraded else []), degraded

        branches: Dict[str, Tuple[Callable[..., List[RecommendationCandidate]], Tuple[Any, ...]]] = {
            SOURCE_COLLABORATIVE: (self._collaborative_candidates, (profile,)),
            SOURCE_CONTENT: (
                self._content.recommend,
                (profile.excluded_course_ids, profile.excluded_course_ids),
            ),
            SOURCE_INTEREST: (self._interest.recommend, (profile.interests, limit)),
            SOURCE_TRENDING: (self._trending.recommend, (limit,)),
        }
        outcomes = await asyncio.gather(
            *(self._run_source(source, func, *args, fallback=[]) for source, (func, args) in branches.items())
        )

        candidate_lists: Dict[str, List[RecommendationCandidate]] = {}
        for source, (candidates, ok) in zip(branches, outcomes):
            candidate_lists[source] = candidates
            if not ok:
                degraded.append(source)

        items = self._aggregator.merge(candidate_lists, profile.excluded_course_ids, limit)
        return items, degraded

    def _collaborative_candidates(self, profile: LearnerProfile) -> List[RecommendationCandidate]:
        peers = self._peer_finder.find(profile.id, profile.completed_course_ids)
        return self._collaborative.recommend(peers, profile.excluded_course_ids)

    async def _load_learner(self, learner_id: str) -> Tuple[Optional[LearnerProfile], List[str]]:
        """Read the learner snapshot; ``None`` means unknown learner or unusable history.

        Interest lookups degrade to "no interests", but without the completed
        and in-progress sets the exclusion rule cannot be enforced, so a
        failure there yields no profile.
        """
        (completed, completed_ok), (in_progress, in_progress_ok), (interests, interests_ok) = await asyncio.gather(
            self._run_source("progress_completed", self._repos.progress.find_completed, learner_id, fallback=None),
            self._run_source("progress_in_progress", self._repos.progress.find_in_progress, learner_id, fallback=None),
            self._run_source("profile_interests", self._repos.profiles.find_interests, learner_id, fallback=set()),
        )
        degraded = [
            name
            for name, ok in (
                ("progress_completed", completed_ok),
                ("progress_in_progress", in_progress_ok),
                ("profile_interests", interests_ok),
            )
            if not ok
        ]
        if not completed_ok or not in_progress_ok:
            return None, degraded
        if interests is None:
            return None, degraded
        profile = LearnerProfile(
            id=learner_id,
            completed_course_ids=completed or set(),
            in_progress_course_ids=in_progress or set(),
            interests=interests,
        )
        return profile, degraded

    async def _run_source(
        self,
        source: str,
        func: Callable[..., T],
        *args: Any,
        fallback: Any = None,
    ) -> Tuple[Any, bool]:
        """Run a blocking repository-backed call off the event loop.

        Returns ``(result, True)`` on success and ``(fallback, False)`` on
        failure.
        """
        try:
            return await asyncio.to_thread(func, *args), True
        except DataSourceUnavailable as exc:
            logger.warning("Recommendation source %s unavailable: %s", source, exc)
        except Exception:  # noqa: BLE001
            logger.exception("Recommendation source %s failed", source)
        emit_event("recommendation_source_degraded", source=source)
        return fallback, False

    # Cache --------------------------------------------------------------------------

    def _read_cache(self, key: str) -> Optional[List[AggregatedRecommendation]]:
        if self._cache is None:
            return None
        try:
            payload = self._cache.get(key)
        except Exception:  # noqa: BLE001
            logger.warning("Recommendation cache read failed for %s", key, exc_info=True)
            return None
        if payload is None:
            return None
        try:
            return [AggregatedRecommendation.model_validate(entry) for entry in payload]
        except (TypeError, ValidationError) as exc:
            logger.warning("Ignoring malformed cache entry %s: %s", key, exc)
            return None

    def _write_cache(self, key: str, items: List[AggregatedRecommendation]) -> None:
        if self._cache is None:
            return
        payload = [item.model_dump(mode="json") for item in items]
        try:
            self._cache.set(key, payload, self._cache_ttl)
        except Exception:  # noqa: BLE001
            logger.warning("Recommendation cache write failed for %s", key, exc_info=True)

    def invalidate_learner(self, learner_id: str) -> None:
        """Drop cached lists for every limit the engine can serve."""
        learner_id = (learner_id or "").strip()
        if self._cache is None or not learner_id:
            return
        for limit in range(1, MAX_RECOMMENDATION_LIMIT + 1):
            try:
                self._cache.delete(recommendation_cache_key(learner_id, limit))
            except Exception:  # noqa: BLE001
                logger.warning("Recommendation cache delete failed for %s", learner_id, exc_info=True)
                return

    # Standalone lookups -------------------------------------------------------------

    async def get_more_like_this(
        self,
        course_id: str,
        limit: object = DEFAULT_SIMILAR_COURSE_LIMIT,
        *,
        timeout: Optional[float] = None,
    ) -> List[SimilarCourse]:
        course_id = (course_id or "").strip()
        if not course_id:
            return []
        resolved_limit = normalize_limit(limit, DEFAULT_SIMILAR_COURSE_LIMIT)
        return await self._bounded(
            "more_like_this",
            course_id,
            self._similar_courses.find,
            course_id,
            resolved_limit,
            timeout=timeout,
        )

    async def get_recommended_learning_paths(
        self,
        learner_id: str,
        limit: object = DEFAULT_LEARNING_PATH_LIMIT,
        *,
        timeout: Optional[float] = None,
    ) -> List[RecommendedLearningPath]:
        learner_id = (learner_id or "").strip()
        if not learner_id:
            return []
        resolved_limit = normalize_limit(limit, DEFAULT_LEARNING_PATH_LIMIT)
        return await self._bounded(
            "learning_paths",
            learner_id,
            self._learning_paths_for,
            learner_id,
            resolved_limit,
            timeout=timeout,
        )

    def _learning_paths_for(self, learner_id: str, limit: int) -> List[RecommendedLearningPath]:
        try:
            interests = self._repos.profiles.find_interests(learner_id)
        except DataSourceUnavailable as exc:
            logger.warning("Profile lookup unavailable for %s: %s", learner_id, exc)
        else:
            if interests is None:
                return []
        return self._learning_paths.recommend(learner_id, limit)

    async def _bounded(
        self,
        source: str,
        subject: str,
        func: Callable[..., List[T]],
        *args: Any,
        timeout: Optional[float],
    ) -> List[T]:
        wait_seconds = self._timeout if timeout is None else timeout
        try:
            result, _ = await asyncio.wait_for(
                self._run_source(source, func, *args, fallback=[]),
                timeout=wait_seconds,
            )
        except asyncio.TimeoutError:
            emit_event("recommendations_timed_out", operation=source, subject=subject, timeout=wait_seconds)
            raise RecommendationTimeout(subject, wait_seconds) from None
        return result


__all__ = ["RecommendationBatch", "RecommendationEngine"]
