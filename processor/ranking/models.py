"""
Data models for the Ranking module.
"""
from dataclasses import dataclass, asdict
from datetime import date, datetime
from typing import Optional

from .config import DEFAULT_AVG_RATING


@dataclass
class StatsWindow:
    """Aggregated stats counters for one story over a horizon's window."""
    views: int = 0
    unique_views: int = 0
    ratings_count: int = 0
    ratings_sum: int = 0
    comments_count: int = 0
    bookmarks_count: int = 0
    shares_count: int = 0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "StatsWindow":
        """Build from an aggregation row. None or missing keys count as zero."""
        if not data:
            return cls()
        return cls(**{k: int(data.get(k) or 0) for k in cls.__dataclass_fields__})

    @property
    def average_rating(self) -> float:
        if self.ratings_count > 0:
            return self.ratings_sum / self.ratings_count
        return 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class RankingEpoch:
    """
    Inputs shared by every horizon computed in one batch.

    The corpus average rating is computed once per epoch and reused, so a
    batch of four horizons scores every story against the same baseline.
    """
    today: date
    now: datetime
    avg_rating_all_stories: float = DEFAULT_AVG_RATING
    source: str = "default"     # "stats", "legacy" or "default"


@dataclass
class ScoredStory:
    """A story's score and dense rank within one horizon."""
    story_id: str
    score: float
    rank: int = 0
