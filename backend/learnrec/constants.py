"""Scoring constants shared by the recommenders."""

SOURCE_COLLABORATIVE = "collaborative"
SOURCE_CONTENT = "content_similarity"
SOURCE_INTEREST = "interest_popularity"
SOURCE_TRENDING = "trending"

# Insertion order is the order sources are reported in.
SOURCE_WEIGHTS = {
    SOURCE_COLLABORATIVE: 0.4,
    SOURCE_CONTENT: 0.3,
    SOURCE_INTEREST: 0.2,
    SOURCE_TRENDING: 0.1,
}

DEFAULT_RECOMMENDATION_LIMIT = 10
DEFAULT_SIMILAR_COURSE_LIMIT = 5
DEFAULT_LEARNING_PATH_LIMIT = 5
MAX_RECOMMENDATION_LIMIT = 50
SCORE_PRECISION = 2

MAX_SIMILAR_LEARNERS = 10
MIN_SHARED_COMPLETIONS = 3

MAX_COLLABORATIVE_CANDIDATES = 20
COLLABORATIVE_COUNT_NORMALIZER = 10

MAX_CONTENT_CANDIDATES = 20
CATEGORY_MATCH_WEIGHT = 3.0
LEVEL_MATCH_WEIGHT = 1.0
TAG_MATCH_WEIGHT = 0.5
CONTENT_RATING_WEIGHT = 0.1

POPULARITY_ENROLLMENT_WEIGHT = 0.5
POPULARITY_RATING_WEIGHT = 10.0
POPULARITY_REVIEW_WEIGHT = 0.1
POPULARITY_NORMALIZER = 100.0

TRENDING_WINDOW_DAYS = 30
TRENDING_ENROLLMENT_WEIGHT = 2.0
TRENDING_RATING_WEIGHT = 5.0
TRENDING_NORMALIZER = 100.0

SIMILAR_LEVEL_WEIGHT = 2.0
SIMILAR_TAG_WEIGHT = 1.0
SIMILAR_RATING_WEIGHT = 0.5

PATH_CONTINUATION_WEIGHT = 10.0
