"""
Configuration and utilities for story ranking.

Contains:
- Bayesian smoothing defaults
- Score weights for rated and unrated stories
- Time decay
- Hot flag threshold
"""
from config import settings


# ============================================
# BAYESIAN SMOOTHING
# ============================================

MIN_RATINGS = settings.RANKING_MIN_RATINGS                # Confidence constant m
DEFAULT_AVG_RATING = settings.RANKING_DEFAULT_AVG_RATING  # Corpus mean when nothing is rated
RATING_SCALE = 10                                         # Ratings are blended on a 0..10 scale


# ============================================
# SCORE WEIGHTS
# ============================================

# Base score when the story has ratings in the window
RATED_WEIGHTS = {
    "views": 0.4,
    "avg_rating": 0.3,
    "bookmarks": 0.2,
    "comments": 0.1,
}

# Base score when it has none
UNRATED_WEIGHTS = {
    "views": 0.6,
    "bookmarks": 0.2,
    "comments": 0.1,
    "chapters": 0.1,
}

# (time adjusted base, bayesian) blend
RATED_BLEND = (0.7, 0.3)
UNRATED_BLEND = (0.9, 0.1)


# ============================================
# DECAY / FLOOR
# ============================================

DECAY_PER_DAY = 0.97        # -3% per day since last content update
MIN_SCORE = 1.0


# ============================================
# HOT FLAGS
# ============================================

HOT_TOP_N = settings.RANKING_HOT_TOP_N


# ============================================
# UTILITY FUNCTIONS
# ============================================

def get_decay_factor(age_days: int) -> float:
    """
    Get decay factor for given age in days.

    Args:
        age_days: Whole days since the story was last updated

    Returns:
        DECAY_PER_DAY ** age_days (1.0 for age 0)
    """
    return DECAY_PER_DAY ** max(0, age_days)


def is_hot(rank: int, top_n: int = HOT_TOP_N) -> bool:
    """A ranked story is hot when it sits in the top N."""
    return 0 < rank <= top_n
