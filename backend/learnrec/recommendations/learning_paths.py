"""Learning path suggestions that reward partially completed paths."""

from __future__ import annotations

from typing import List

from ..constants import PATH_CONTINUATION_WEIGHT
from ..models import RecommendedLearningPath
from ..repositories.interfaces import LearningPathStore, ProgressStore


class LearningPathRecommender:
    def __init__(self, paths: LearningPathStore, progress: ProgressStore) -> None:
        self._paths = paths
        self._progress = progress

    def recommend(self, learner_id: str, limit: int) -> List[RecommendedLearningPath]:
        if limit <= 0:
            return []
        completed = self._progress.find_completed(learner_id)

        scored: List[RecommendedLearningPath] = []
        for path in self._paths.find_published():
            if not path.is_published or path.is_deleted:
                continue
            course_ids = list(dict.fromkeys(path.course_ids))
            done = sum(1 for course_id in course_ids if course_id in completed)
            # Finished paths and untouched paths get no continuation bonus.
            score = PATH_CONTINUATION_WEIGHT * done if 0 < done < len(course_ids) else 0.0
            scored.append(RecommendedLearningPath(path=path, score=score, completed_course_count=done))

        scored.sort(key=lambda entry: (-entry.score, entry.path.id))
        return scored[:limit]


__all__ = ["LearningPathRecommender"]
