"""
Processor package for the Story Ranking Backend.

- ranking: Scoring, leaderboard computation, availability guard, reads
- stats: Per-story view and rating ingestion
"""

from .ranking import (
    RankingComputer,
    RankingInitializer,
    RankingAvailabilityGuard,
    RankingQueryService,
    HotFlagDispatcher,
    calculate_bayesian_score,
)
from .stats import StoryStatsService

__all__ = [
    # Ranking
    "RankingComputer",
    "RankingInitializer",
    "RankingAvailabilityGuard",
    "RankingQueryService",
    "HotFlagDispatcher",
    "calculate_bayesian_score",
    # Stats
    "StoryStatsService",
]
