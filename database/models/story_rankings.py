"""
Story Ranking Model

Computed scores and ranks per story and day, for four horizons.
"""
import datetime as dt

from sqlalchemy import String, Integer, Float, Date, Index, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from constants import RankingHorizon
from .base import Base, TimestampMixin


class StoryRanking(Base, TimestampMixin):
    """
    Leaderboard position of a story on a given day.

    Each horizon's computation rewrites its own score/rank columns for
    every eligible story on today's row. A rank of 0 means the horizon
    has not ranked this story today.
    """
    __tablename__ = "story_rankings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    story_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("stories.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)

    # Scores
    daily_score: Mapped[float] = mapped_column(Float, default=0.0)
    weekly_score: Mapped[float] = mapped_column(Float, default=0.0)
    monthly_score: Mapped[float] = mapped_column(Float, default=0.0)
    all_time_score: Mapped[float] = mapped_column(Float, default=0.0)

    # Ranks (1 = best, 0 = not ranked yet)
    daily_rank: Mapped[int] = mapped_column(Integer, default=0, index=True)
    weekly_rank: Mapped[int] = mapped_column(Integer, default=0, index=True)
    monthly_rank: Mapped[int] = mapped_column(Integer, default=0, index=True)
    all_time_rank: Mapped[int] = mapped_column(Integer, default=0, index=True)

    # Denormalized calendar fields (month is 0-based)
    day: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    iso_week: Mapped[int] = mapped_column(Integer, nullable=False)

    story: Mapped["Story"] = relationship("Story", lazy="raise")

    __table_args__ = (
        UniqueConstraint('story_id', 'date', name='uq_story_rankings_story_date'),
        Index('idx_story_rankings_ymd', 'year', 'month', 'day'),
        Index('idx_story_rankings_week', 'year', 'iso_week'),
        Index('idx_story_rankings_month', 'year', 'month'),
    )


# Horizon -> (score column, rank column)
HORIZON_COLUMNS = {
    RankingHorizon.DAILY: ("daily_score", "daily_rank"),
    RankingHorizon.WEEKLY: ("weekly_score", "weekly_rank"),
    RankingHorizon.MONTHLY: ("monthly_score", "monthly_rank"),
    RankingHorizon.ALL_TIME: ("all_time_score", "all_time_rank"),
}
