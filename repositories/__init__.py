"""
SQLAlchemy-based Repositories

This package provides async repository pattern using SQLAlchemy ORM.

Usage:
    from repositories import StoryRankingRepository
    from database import get_session

    async with get_session() as session:
        repo = StoryRankingRepository(session)
        rows = await repo.find_rankings(RankingHorizon.DAILY, date.today())
"""

from .base import BaseRepository
from .stories import StoryRepository
from .story_stats import StoryStatsRepository
from .story_rankings import StoryRankingRepository
from .ranking_locks import RankingLockRepository

__all__ = [
    "BaseRepository",
    "StoryRepository",
    # Stats and rankings
    "StoryStatsRepository",
    "StoryRankingRepository",
    # System
    "RankingLockRepository",
]
