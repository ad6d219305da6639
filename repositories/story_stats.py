"""
Story Stats Repository

Handles all database operations for per-story daily counters: point
lookups, windowed aggregations for ranking, and counter increments for
request-time ingestion.

Increments are single upsert statements, so concurrent views and ratings
of the same story on the same day all land in its one row.
"""
from datetime import date
from typing import Optional, Iterable

from sqlalchemy import select, and_, func
from sqlalchemy.dialects.sqlite import insert

from database.models import StoryStats, COUNTER_FIELDS
from utils.dates import calendar_fields, iso_week_bounds
from .base import BaseRepository

# Rows per multi-VALUES insert, well under SQLite's bound parameter limit
ENSURE_ROWS_BATCH = 500


class StoryStatsRepository(BaseRepository[StoryStats]):
    """Repository for story stats operations."""

    model = StoryStats

    # ============================================
    # POINT QUERIES
    # ============================================

    async def find_by_story_and_date(self, story_id: str, day: date) -> Optional[StoryStats]:
        """Get a story's stats row for one day."""
        stmt = (
            select(StoryStats)
            .where(and_(StoryStats.story_id == story_id, StoryStats.date == day))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    # ============================================
    # AGGREGATIONS
    # ============================================

    async def _aggregate(self, *conditions) -> dict[str, dict]:
        """Sum every counter per story for rows matching conditions."""
        columns = [func.coalesce(func.sum(getattr(StoryStats, f)), 0).label(f) for f in COUNTER_FIELDS]
        stmt = select(StoryStats.story_id, *columns).group_by(StoryStats.story_id)
        if conditions:
            stmt = stmt.where(and_(*conditions))

        result = await self.session.execute(stmt)
        return {
            row.story_id: {f: int(getattr(row, f)) for f in COUNTER_FIELDS}
            for row in result
        }

    async def aggregate_by_date(self, day: date) -> dict[str, dict]:
        """Per-story totals for one day."""
        return await self._aggregate(StoryStats.date == day)

    async def aggregate_by_week(self, day: date) -> dict[str, dict]:
        """Per-story totals for the ISO week (Monday..Sunday) containing `day`."""
        monday, sunday = iso_week_bounds(day)
        return await self._aggregate(StoryStats.date >= monday, StoryStats.date <= sunday)

    async def aggregate_by_month(self, year: int, month: int) -> dict[str, dict]:
        """Per-story totals for a month (0-based month)."""
        return await self._aggregate(StoryStats.year == year, StoryStats.month == month)

    async def aggregate_all_time(self) -> dict[str, dict]:
        """Per-story totals across all history."""
        return await self._aggregate()

    async def sum_for_story(self, story_id: str, since: Optional[date] = None) -> dict:
        """Totals for one story, optionally from `since` onwards."""
        conditions = [StoryStats.story_id == story_id]
        if since is not None:
            conditions.append(StoryStats.date >= since)
        totals = await self._aggregate(*conditions)
        return totals.get(story_id, {f: 0 for f in COUNTER_FIELDS})

    async def corpus_rating_totals(self) -> tuple[int, int]:
        """(ratings_sum, ratings_count) across every story and day."""
        stmt = select(
            func.coalesce(func.sum(StoryStats.ratings_sum), 0),
            func.coalesce(func.sum(StoryStats.ratings_count), 0),
        )
        result = await self.session.execute(stmt)
        ratings_sum, ratings_count = result.one()
        return int(ratings_sum), int(ratings_count)

    # ============================================
    # WRITES
    # ============================================

    @staticmethod
    def _zeroed_row(story_id: str, day: date) -> dict:
        return {
            "story_id": story_id,
            "date": day,
            **{f: 0 for f in COUNTER_FIELDS},
            **calendar_fields(day),
        }

    async def increment(self, story_id: str, day: date, **deltas: int) -> StoryStats:
        """
        Add deltas to counters of the (story, day) row, creating it if missing.

        Negative deltas are only meaningful for ratings_sum (rating edits).
        Counters are clamped at zero.

        Returns:
            The row as stored after the increment
        """
        unknown = set(deltas) - set(COUNTER_FIELDS)
        if unknown:
            raise ValueError(f"Unknown stats counters: {sorted(unknown)}")

        row = self._zeroed_row(story_id, day)
        row.update({field: max(0, delta) for field, delta in deltas.items()})

        # Column arithmetic runs in SQLite against the stored row
        stmt = (
            insert(StoryStats)
            .values(**row)
            .on_conflict_do_update(
                index_elements=["story_id", "date"],
                set_={
                    **{
                        field: func.max(getattr(StoryStats, field) + delta, 0)
                        for field, delta in deltas.items()
                    },
                    "updated_at": func.now(),
                },
            )
        )
        await self.execute_write(stmt)
        return await self.find_by_story_and_date(story_id, day)

    async def ensure_rows(self, story_ids: Iterable[str], day: date) -> int:
        """
        Create zeroed rows for stories missing one on `day`.

        Existing rows are left untouched so accumulated counters survive.

        Returns:
            Number of rows created
        """
        story_ids = list(story_ids)
        if not story_ids:
            return 0

        created = 0
        for start in range(0, len(story_ids), ENSURE_ROWS_BATCH):
            batch = story_ids[start:start + ENSURE_ROWS_BATCH]
            stmt = (
                insert(StoryStats)
                .values([self._zeroed_row(story_id, day) for story_id in batch])
                .on_conflict_do_nothing(index_elements=["story_id", "date"])
            )
            created += await self.execute_write(stmt)
        return created
