"""
Story Ranking Repository

Handles database operations for computed leaderboards: paged reads per
horizon and the per-horizon bulk upsert used by the ranking jobs.
"""
from datetime import date
from typing import Optional, Sequence, Iterable

from sqlalchemy import select, and_, func
from sqlalchemy.orm import selectinload

from constants import RankingHorizon
from database.models import StoryRanking, HORIZON_COLUMNS
from utils.dates import calendar_fields
from .base import BaseRepository


class StoryRankingRepository(BaseRepository[StoryRanking]):
    """Repository for story ranking operations."""

    model = StoryRanking

    # ============================================
    # RANKING QUERIES
    # ============================================

    async def find_by_story_and_date(self, story_id: str, day: date) -> Optional[StoryRanking]:
        """Get a story's ranking row for one day."""
        stmt = select(StoryRanking).where(
            and_(StoryRanking.story_id == story_id, StoryRanking.date == day)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_rankings(
        self,
        horizon: RankingHorizon,
        day: date,
        limit: int = 20,
        skip: int = 0,
    ) -> Sequence[StoryRanking]:
        """
        Get one page of a horizon's leaderboard for a day.

        Rows are ordered by the horizon's rank ascending, then story id.
        Rows the horizon has not ranked (rank 0) are included and sort first.
        The story relationship is eagerly loaded.
        """
        _, rank_column = HORIZON_COLUMNS[horizon]
        stmt = (
            select(StoryRanking)
            .options(selectinload(StoryRanking.story))
            .where(StoryRanking.date == day)
            .order_by(getattr(StoryRanking, rank_column).asc(), StoryRanking.story_id.asc())
            .limit(limit)
            .offset(skip)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_rankings(self, day: date) -> int:
        """Count every ranking row for a day, ranked or not."""
        stmt = select(func.count()).select_from(StoryRanking).where(StoryRanking.date == day)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def count_ranked(self, day: date, horizon: RankingHorizon) -> int:
        """Count rows for a day that the horizon has ranked (rank > 0)."""
        _, rank_column = HORIZON_COLUMNS[horizon]
        stmt = (
            select(func.count())
            .select_from(StoryRanking)
            .where(and_(StoryRanking.date == day, getattr(StoryRanking, rank_column) > 0))
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def get_for_date(self, day: date, story_ids: Optional[Iterable[str]] = None) -> dict[str, StoryRanking]:
        """Get a day's ranking rows keyed by story id."""
        stmt = select(StoryRanking).where(StoryRanking.date == day)
        if story_ids is not None:
            stmt = stmt.where(StoryRanking.story_id.in_(list(story_ids)))
        result = await self.session.execute(stmt)
        return {row.story_id: row for row in result.scalars().all()}

    # ============================================
    # WRITES
    # ============================================

    async def upsert_horizon(
        self,
        day: date,
        horizon: RankingHorizon,
        ranked: Sequence[tuple[str, float]],
    ) -> int:
        """
        Write one horizon's scores and ranks for a day.

        Args:
            day: Ranking date
            horizon: Horizon whose columns are written
            ranked: (story_id, score) pairs already in rank order

        Rows for the day that are not in `ranked` get this horizon's
        score and rank reset to 0 so ranks stay a dense 1..N permutation.
        Calendar fields are written on new rows, and always by the daily
        horizon.

        Returns:
            Number of rows ranked
        """
        score_column, rank_column = HORIZON_COLUMNS[horizon]
        fields = calendar_fields(day)
        existing = await self.get_for_date(day)
        ranked_ids = set()

        new_rows = []
        for position, (story_id, score) in enumerate(ranked):
            ranked_ids.add(story_id)
            row = existing.get(story_id)
            if row is None:
                row = StoryRanking(story_id=story_id, date=day, **fields)
                new_rows.append(row)
            elif horizon == RankingHorizon.DAILY:
                for key, value in fields.items():
                    setattr(row, key, value)

            setattr(row, score_column, score)
            setattr(row, rank_column, position + 1)

        for story_id, row in existing.items():
            if story_id not in ranked_ids and getattr(row, rank_column):
                setattr(row, score_column, 0.0)
                setattr(row, rank_column, 0)

        if new_rows:
            self.session.add_all(new_rows)
        await self.session.flush()
        return len(ranked)
