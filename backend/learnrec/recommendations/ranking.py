"""Ordering and limit helpers shared by every ranked list."""

from __future__ import annotations

from typing import Iterable, List

from ..constants import MAX_RECOMMENDATION_LIMIT
from ..models import RecommendationCandidate


def normalize_limit(value: object, default: int, maximum: int = MAX_RECOMMENDATION_LIMIT) -> int:
    """Coerce a caller-supplied limit; non-numeric or non-positive values fall back to ``default``."""
    if isinstance(value, bool):
        return default
    try:
        parsed = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError, OverflowError):
        return default
    if parsed <= 0:
        return default
    return min(parsed, maximum)


def top_candidates(candidates: Iterable[RecommendationCandidate], limit: int) -> List[RecommendationCandidate]:
    """Highest raw score first, course id ascending on ties."""
    ordered = sorted(candidates, key=lambda candidate: (-candidate.raw_score, candidate.course_id))
    return ordered[: max(limit, 0)]


__all__ = ["normalize_limit", "top_candidates"]
