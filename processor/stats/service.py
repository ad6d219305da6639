"""
Story Stats Service - ingestion and read helpers for per-day counters.

Views and ratings land in today's StoryStats row for the story, which the
ranking jobs later aggregate per horizon.
"""
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from loguru import logger

from constants import TimeRange
from database import get_session
from repositories import StoryRepository, StoryStatsRepository
from utils.dates import start_of_day
from processor.ranking.errors import StoryNotFoundError, InvalidRatingError
from processor.ranking.models import StatsWindow


MIN_RATING = 1
MAX_RATING = 10

# Days looked back for each time range, None = everything
TIME_RANGE_DAYS = {
    TimeRange.DAY: 0,
    TimeRange.WEEK: 7,
    TimeRange.MONTH: 30,
    TimeRange.YEAR: 365,
    TimeRange.ALL: None,
}


def validate_rating(value, field: str = "rating") -> int:
    """Ratings are integers in 1..10."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRatingError(f"{field} must be an integer between {MIN_RATING} and {MAX_RATING}")
    if not MIN_RATING <= value <= MAX_RATING:
        raise InvalidRatingError(f"{field} must be between {MIN_RATING} and {MAX_RATING}, got {value}")
    return value


class StoryStatsService:
    """Records views and ratings, and answers per-story stats queries."""

    def __init__(self, now_fn: Callable[[], datetime] = datetime.now):
        self.now_fn = now_fn

    def today(self) -> date:
        return start_of_day(self.now_fn())

    async def _require_story(self, session, story_id: str) -> None:
        if await StoryRepository(session).get(story_id) is None:
            raise StoryNotFoundError(story_id)

    # ============================================
    # INGESTION
    # ============================================

    async def record_view(self, story_id: str, unique: bool = False) -> dict:
        """
        Count one view for today.

        Increments today's `views` (and `unique_views` when `unique`) and the
        story's lifetime view counter.

        Returns:
            Today's counters for the story
        """
        today = self.today()
        async with get_session() as session:
            await self._require_story(session, story_id)

            deltas = {"views": 1}
            if unique:
                deltas["unique_views"] = 1
            stats = await StoryStatsRepository(session).increment(story_id, today, **deltas)
            await StoryRepository(session).increment_views(story_id)
            result = {"story_id": story_id, "date": today.isoformat(), "views": stats.views, "unique_views": stats.unique_views}

        logger.debug(f"View recorded for {story_id}")
        return result

    async def record_rating(self, story_id: str, rating: int, previous_rating: Optional[int] = None) -> dict:
        """
        Record a new rating, or an edit of an earlier one.

        A new rating adds to both ratings_count and ratings_sum. An edit
        (previous_rating given) only shifts ratings_sum by the difference.

        Raises:
            InvalidRatingError: rating (or previous_rating) outside 1..10
            StoryNotFoundError: unknown story
        """
        validate_rating(rating)
        if previous_rating is not None:
            validate_rating(previous_rating, "previous_rating")

        today = self.today()
        async with get_session() as session:
            await self._require_story(session, story_id)

            repo = StoryStatsRepository(session)
            if previous_rating is None:
                await repo.increment(story_id, today, ratings_count=1, ratings_sum=rating)
            elif rating != previous_rating:
                await repo.increment(story_id, today, ratings_sum=rating - previous_rating)

        logger.info(
            f"Rating {'edited' if previous_rating is not None else 'recorded'} for {story_id}: {rating}"
        )
        return await self.get_rating_stats(story_id)

    async def rollup_daily_stats(self) -> int:
        """
        Make sure every eligible story has a stats row for yesterday.

        Only missing rows are created. Counters already accumulated are kept.

        Returns:
            Number of rows created
        """
        yesterday = self.today() - timedelta(days=1)
        async with get_session() as session:
            stories = await StoryRepository(session).get_rankable()
            created = await StoryStatsRepository(session).ensure_rows([s.id for s in stories], yesterday)

        logger.info(f"Daily stats rollup for {yesterday}: {created} rows created ({len(stories)} stories)")
        return created

    # ============================================
    # QUERIES
    # ============================================

    async def get_total_views(self, story_id: str) -> int:
        """Views summed over every stats row of the story."""
        async with get_session() as session:
            await self._require_story(session, story_id)
            totals = await StoryStatsRepository(session).sum_for_story(story_id)
        return totals["views"]

    async def get_views_by_time_range(self, story_id: str, time_range: TimeRange = TimeRange.ALL) -> int:
        """
        Views since the start of the range.

        day = today only, week/month/year = the last 7/30/365 days, all = everything.
        """
        time_range = TimeRange(time_range)
        days = TIME_RANGE_DAYS[time_range]
        since = None if days is None else self.today() - timedelta(days=days)

        async with get_session() as session:
            await self._require_story(session, story_id)
            totals = await StoryStatsRepository(session).sum_for_story(story_id, since=since)
        return totals["views"]

    async def get_rating_stats(self, story_id: str) -> dict:
        """Returns {ratings_count, ratings_sum, average_rating} with the average rounded to 2 places."""
        async with get_session() as session:
            await self._require_story(session, story_id)
            totals = await StoryStatsRepository(session).sum_for_story(story_id)

        window = StatsWindow.from_dict(totals)
        return {
            "ratings_count": window.ratings_count,
            "ratings_sum": window.ratings_sum,
            "average_rating": min(MAX_RATING, max(0, round(window.average_rating, 2))),
        }

    async def get_all_stats(self, story_id: str) -> dict:
        """Totals, ratings, views per time range and today's counters."""
        views_by_range = {
            r.value: await self.get_views_by_time_range(story_id, r)
            for r in TimeRange
        }
        async with get_session() as session:
            today_row = await StoryStatsRepository(session).find_by_story_and_date(story_id, self.today())
            today_stats = StatsWindow.from_dict(today_row.to_dict() if today_row else None)

        return {
            "total_views": views_by_range[TimeRange.ALL.value],
            "ratings": await self.get_rating_stats(story_id),
            "views_by_time_range": views_by_range,
            "daily_stats": today_stats.to_dict(),
        }
