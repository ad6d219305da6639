"""
Ranking Module

Scores stories and maintains the daily / weekly / monthly / all-time
leaderboards.

Components:
- calculate_bayesian_score: Pure scoring function
- RankingComputer: Per-horizon computation and storage
- HotFlagDispatcher: Queued hot flag patches after each run
- horizon_lock: Per-horizon advisory lock
- RankingInitializer: Creates missing rankings at startup
- RankingAvailabilityGuard: Request-time readiness checks
- RankingQueryService: Paged leaderboard reads
"""

from .config import (
    MIN_RATINGS,
    DEFAULT_AVG_RATING,
    DECAY_PER_DAY,
    MIN_SCORE,
    HOT_TOP_N,
    get_decay_factor,
    is_hot,
)
from .errors import (
    RankingError,
    InvalidHorizonError,
    RankingLockError,
    RankingUnavailableError,
    StatsError,
    StoryNotFoundError,
    InvalidRatingError,
)
from .models import StatsWindow, RankingEpoch, ScoredStory
from .scorer import calculate_bayesian_score, bayesian_rating
from .hot_flags import HotFlagDispatcher, HotFlagJob
from .lock import horizon_lock
from .computer import RankingComputer
from .initializer import RankingInitializer
from .guard import RankingAvailabilityGuard
from .query import RankingQueryService


__all__ = [
    # Main classes
    "RankingComputer",
    "RankingInitializer",
    "RankingAvailabilityGuard",
    "RankingQueryService",
    "HotFlagDispatcher",
    "HotFlagJob",
    "horizon_lock",
    # Scoring
    "calculate_bayesian_score",
    "bayesian_rating",
    # Models
    "StatsWindow",
    "RankingEpoch",
    "ScoredStory",
    # Errors
    "RankingError",
    "InvalidHorizonError",
    "RankingLockError",
    "RankingUnavailableError",
    "StatsError",
    "StoryNotFoundError",
    "InvalidRatingError",
    # Config
    "MIN_RATINGS",
    "DEFAULT_AVG_RATING",
    "DECAY_PER_DAY",
    "MIN_SCORE",
    "HOT_TOP_N",
    "get_decay_factor",
    "is_hot",
]
