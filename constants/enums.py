"""
Shared Enums

Application-wide enums used across multiple modules.
"""
from enum import Enum


class RankingHorizon(str, Enum):
    """Time horizons a leaderboard is computed for. Values match the URL segment."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ALL_TIME = "all-time"

    @property
    def key(self) -> str:
        """Identifier form used in result dicts ("all_time")."""
        return self.value.replace("-", "_")


class StoryStatus(str, Enum):
    """Publication status of a story."""
    DRAFT = "draft"
    PUBLISHED = "published"
    HIDDEN = "hidden"


class ApprovalStatus(str, Enum):
    """Moderation status of a story."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TimeRange(str, Enum):
    """Windows accepted by the views-by-time-range endpoint."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


# Horizon computation order used by the initializer and update/all
HORIZON_ORDER = [
    RankingHorizon.DAILY,
    RankingHorizon.WEEKLY,
    RankingHorizon.MONTHLY,
    RankingHorizon.ALL_TIME,
]

# Dict versions for request validation
RANKING_HORIZONS = {h.value: h for h in RankingHorizon}
