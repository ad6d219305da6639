"""
Story Stats Model

Per-story, per-day activity counters.
"""
import datetime as dt

from sqlalchemy import String, Integer, Date, Index, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class StoryStats(Base, TimestampMixin):
    """
    Daily activity counters for a story.

    Exactly one row per (story, day) accumulates all of that day's
    activity. Rows are created lazily by the first view/rating of the day
    or by the daily rollup job, and are never deleted.
    """
    __tablename__ = "story_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    story_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("stories.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)

    # Counters
    views: Mapped[int] = mapped_column(Integer, default=0)
    unique_views: Mapped[int] = mapped_column(Integer, default=0)
    ratings_count: Mapped[int] = mapped_column(Integer, default=0)
    ratings_sum: Mapped[int] = mapped_column(Integer, default=0)
    comments_count: Mapped[int] = mapped_column(Integer, default=0)
    bookmarks_count: Mapped[int] = mapped_column(Integer, default=0)
    shares_count: Mapped[int] = mapped_column(Integer, default=0)

    # Denormalized calendar fields (month is 0-based)
    day: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    iso_week: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint('story_id', 'date', name='uq_story_stats_story_date'),
        Index('idx_story_stats_ymd', 'year', 'month', 'day'),
        Index('idx_story_stats_week', 'year', 'iso_week'),
        Index('idx_story_stats_month', 'year', 'month'),
    )


# Counter columns summed by every aggregation window
COUNTER_FIELDS = (
    "views",
    "unique_views",
    "ratings_count",
    "ratings_sum",
    "comments_count",
    "bookmarks_count",
    "shares_count",
)
