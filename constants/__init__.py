"""
Constants package for the Story Ranking Backend.

Contains shared enums used by models, services and routes.
"""

from .enums import (
    RankingHorizon,
    StoryStatus,
    ApprovalStatus,
    TimeRange,
    HORIZON_ORDER,
    RANKING_HORIZONS,
)

__all__ = [
    "RankingHorizon",
    "StoryStatus",
    "ApprovalStatus",
    "TimeRange",
    "HORIZON_ORDER",
    "RANKING_HORIZONS",
]
