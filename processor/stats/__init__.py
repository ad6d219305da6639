"""
Stats Module - per-story daily counters (views, ratings) and their reads.
"""

from .service import StoryStatsService, validate_rating, TIME_RANGE_DAYS

__all__ = [
    "StoryStatsService",
    "validate_rating",
    "TIME_RANGE_DAYS",
]
