"""Error types raised across the recommendation service."""

from __future__ import annotations


class RecommendationError(Exception):
    """Base class for recommendation service failures."""


class DataSourceUnavailable(RecommendationError):
    """A repository could not answer a read query."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class RecommendationTimeout(RecommendationError):
    """The concurrent recommendation branches did not finish in time."""

    def __init__(self, learner_id: str, timeout: float) -> None:
        super().__init__(f"Recommendations for {learner_id} exceeded {timeout:.2f}s")
        self.learner_id = learner_id
        self.timeout = timeout


__all__ = [
    "DataSourceUnavailable",
    "RecommendationError",
    "RecommendationTimeout",
]
