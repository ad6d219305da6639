"""
Story Model

Stories are owned by the content subsystem. The ranking code reads their
metadata and eligibility, and only ever writes the hot_* flags and the
view counter.
"""
from datetime import datetime
from typing import Optional, List

from sqlalchemy import String, Integer, Float, Boolean, DateTime, Text, Index, JSON, func
from sqlalchemy.orm import Mapped, mapped_column

from constants import StoryStatus, ApprovalStatus, RankingHorizon
from .base import Base


class Story(Base):
    """A published (or not yet published) story."""
    __tablename__ = "stories"

    # Primary key
    id: Mapped[str] = mapped_column(String(50), primary_key=True)

    # Content
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    categories: Mapped[Optional[List[dict]]] = mapped_column(JSON, nullable=True)  # [{"name": ..., "slug": ...}]
    author_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    chapter_count: Mapped[int] = mapped_column(Integer, default=0)
    views: Mapped[int] = mapped_column(Integer, default=0)

    # Eligibility
    status: Mapped[str] = mapped_column(String(20), default=StoryStatus.DRAFT.value)
    approval_status: Mapped[str] = mapped_column(String(20), default=ApprovalStatus.PENDING.value)

    # Legacy rating fields, only used when stats aggregation fails
    stars: Mapped[float] = mapped_column(Float, default=0.0)
    count_star: Mapped[int] = mapped_column(Integer, default=0)

    # Display flags
    is_full: Mapped[bool] = mapped_column(Boolean, default=False)
    is_hot: Mapped[bool] = mapped_column(Boolean, default=False)
    is_new: Mapped[bool] = mapped_column(Boolean, default=False)

    # Set by the ranking jobs for the top N of each horizon
    hot_day: Mapped[bool] = mapped_column(Boolean, default=False)
    hot_week: Mapped[bool] = mapped_column(Boolean, default=False)
    hot_month: Mapped[bool] = mapped_column(Boolean, default=False)
    hot_all_time: Mapped[bool] = mapped_column(Boolean, default=False)

    # No onupdate: updated_at tracks content edits and feeds time decay,
    # so counter and flag writes must leave it alone.
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=func.now(), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=func.now(), nullable=True)

    __table_args__ = (
        Index('idx_stories_eligibility', 'status', 'approval_status'),
    )

    @property
    def category_slugs(self) -> List[str]:
        return [c.get("slug") for c in (self.categories or []) if isinstance(c, dict)]


# Horizon -> Story flag set for that horizon's top N
HOT_FLAG_COLUMNS = {
    RankingHorizon.DAILY: "hot_day",
    RankingHorizon.WEEKLY: "hot_week",
    RankingHorizon.MONTHLY: "hot_month",
    RankingHorizon.ALL_TIME: "hot_all_time",
}
