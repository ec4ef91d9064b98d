"""Weighted merge of the per-source candidate lists."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..constants import SCORE_PRECISION, SOURCE_WEIGHTS
from ..models import AggregatedRecommendation, CourseSummary, RecommendationCandidate


@dataclass
class _Accumulator:
    course: CourseSummary
    weighted_total: float = 0.0
    sources: List[str] = field(default_factory=list)

    @property
    def final_score(self) -> float:
        return self.weighted_total / len(self.sources)


class ScoreAggregator:
    """Blends source lists into one ranked list.

    Each candidate's raw score is multiplied by its source weight; a course's
    final score is the mean of its weighted scores over the sources that
    proposed it, so a course is never penalised for sources that stayed
    silent. Courses in the exclusion set are dropped, ties are broken by
    course id, and scores are rounded only after ordering.
    """

    def __init__(self, weights: Optional[Mapping[str, float]] = None) -> None:
        self._weights: Dict[str, float] = dict(weights if weights is not None else SOURCE_WEIGHTS)
        for source, weight in self._weights.items():
            if weight < 0:
                raise ValueError(f"Source weight for {source} must be non-negative.")

    @property
    def weights(self) -> Mapping[str, float]:
        return dict(self._weights)

    def merge(
        self,
        candidate_lists: Mapping[str, Sequence[RecommendationCandidate]],
        excluded_course_ids: Iterable[str],
        limit: int,
    ) -> List[AggregatedRecommendation]:
        unknown = set(candidate_lists) - set(self._weights)
        if unknown:
            raise ValueError(f"Unknown recommendation sources: {', '.join(sorted(unknown))}")
        if limit <= 0:
            return []

        excluded = set(excluded_course_ids)
        merged: Dict[str, _Accumulator] = {}
        for source, weight in self._weights.items():
            seen: set[str] = set()
            for candidate in candidate_lists.get(source, ()):
                # One contribution per source; lists arrive best-first.
                if candidate.course_id in seen:
                    continue
                seen.add(candidate.course_id)
                entry = merged.setdefault(candidate.course_id, _Accumulator(course=candidate.course))
                entry.weighted_total += candidate.raw_score * weight
                entry.sources.append(source)

        ranked = sorted(
            (
                (entry.final_score, course_id, entry)
                for course_id, entry in merged.items()
                if course_id not in excluded
            ),
            key=lambda item: (-item[0], item[1]),
        )
        return [
            AggregatedRecommendation(
                course_id=course_id,
                final_score=round(score, SCORE_PRECISION),
                contributing_source_count=len(entry.sources),
                sources=tuple(entry.sources),
                course=entry.course,
            )
            for score, course_id, entry in ranked[:limit]
        ]


__all__ = ["ScoreAggregator"]
