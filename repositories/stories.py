"""
Story Repository

Read access to stories for ranking, plus the two writes the ranking
subsystem is allowed to make: hot flags and the view counter.
"""
from typing import Sequence, Iterable

from sqlalchemy import select, update, and_, func

from constants import RankingHorizon, StoryStatus, ApprovalStatus
from database.models import Story, HOT_FLAG_COLUMNS
from .base import BaseRepository


class StoryRepository(BaseRepository[Story]):
    """Repository for story operations."""

    model = Story

    # ============================================
    # STORY QUERIES
    # ============================================

    async def get_rankable(self) -> Sequence[Story]:
        """
        Get all stories eligible for ranking.

        Only published and approved stories are ranked. Ordered by id so the
        input order is stable across runs.
        """
        stmt = (
            select(Story)
            .where(
                and_(
                    Story.status == StoryStatus.PUBLISHED.value,
                    Story.approval_status == ApprovalStatus.APPROVED.value,
                )
            )
            .order_by(Story.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def legacy_rating_totals(self) -> tuple[float, int]:
        """
        (stars * count_star summed, count_star summed) over rated stories.

        Fallback source for the corpus average when stats aggregation fails.
        """
        stmt = select(
            func.coalesce(func.sum(Story.stars * Story.count_star), 0),
            func.coalesce(func.sum(Story.count_star), 0),
        ).where(Story.count_star > 0)
        result = await self.session.execute(stmt)
        stars_total, count_total = result.one()
        return float(stars_total), int(count_total)

    # ============================================
    # RANKING SIDE EFFECTS
    # ============================================

    async def set_hot_flags(
        self,
        horizon: RankingHorizon,
        hot_ids: Iterable[str],
        cold_ids: Iterable[str],
    ) -> int:
        """
        Set hot_<horizon> to True for hot_ids and False for cold_ids.

        updated_at is written back unchanged so flag writes never move a
        story's time decay.

        Returns:
            Number of rows touched
        """
        flag = HOT_FLAG_COLUMNS[horizon]
        touched = 0

        for ids, value in ((list(hot_ids), True), (list(cold_ids), False)):
            if not ids:
                continue
            stmt = (
                update(Story)
                .where(Story.id.in_(ids))
                .values({flag: value, "updated_at": Story.updated_at})
            )
            touched += await self.execute_write(stmt)

        return touched

    async def increment_views(self, story_id: str, amount: int = 1) -> None:
        """Bump the lifetime view counter without touching updated_at."""
        stmt = (
            update(Story)
            .where(Story.id == story_id)
            .values(views=Story.views + amount, updated_at=Story.updated_at)
        )
        await self.execute_write(stmt)
