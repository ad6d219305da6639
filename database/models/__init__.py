"""
SQLAlchemy ORM Models

Models are organized by domain:
- Stories: content entity read (and flag-patched) by ranking
- Stats: per-story daily counters
- Rankings: per-story daily scores and ranks
- System: advisory locks
"""

from .base import Base, TimestampMixin
from .story import Story, HOT_FLAG_COLUMNS
from .story_stats import StoryStats, COUNTER_FIELDS
from .story_rankings import StoryRanking, HORIZON_COLUMNS
from .system import RankingLock

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Stories
    "Story",
    "HOT_FLAG_COLUMNS",
    # Stats
    "StoryStats",
    "COUNTER_FIELDS",
    # Rankings
    "StoryRanking",
    "HORIZON_COLUMNS",
    # System
    "RankingLock",
]
