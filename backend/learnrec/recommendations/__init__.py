"""Signal sources, aggregation and the orchestrating engine."""

from .aggregator import ScoreAggregator
from .content import ContentSimilarityRecommender, SimilarCourseFinder
from .engine import RecommendationBatch, RecommendationEngine
from .learning_paths import LearningPathRecommender
from .peers import CollaborativeRecommender, SimilarLearnerFinder
from .popularity import InterestPopularityRecommender, TrendingRecommender
from .ranking import normalize_limit

__all__ = [
    "CollaborativeRecommender",
    "ContentSimilarityRecommender",
    "InterestPopularityRecommender",
    "LearningPathRecommender",
    "RecommendationBatch",
    "RecommendationEngine",
    "ScoreAggregator",
    "SimilarCourseFinder",
    "SimilarLearnerFinder",
    "TrendingRecommender",
    "normalize_limit",
]
