"""
Ranking Computer - builds the four story leaderboards.

Every horizon runs the same steps:
1. Take the horizon's advisory lock
2. Aggregate stats over the horizon's window
3. Score every published + approved story against the epoch's corpus average
4. Sort (score desc, story id asc) and assign dense ranks
5. Upsert today's ranking rows in one transaction
6. Queue hot flag patches for the story table

A batch (`update_all_rankings`) shares one RankingEpoch across horizons.
"""
from datetime import datetime
from typing import Callable, Optional, Sequence

from loguru import logger

from config import settings
from constants import RankingHorizon, HORIZON_ORDER
from database import get_session
from database.models import Story
from repositories import StoryRepository, StoryStatsRepository, StoryRankingRepository
from utils.dates import start_of_day
from .config import MIN_RATINGS, DEFAULT_AVG_RATING, HOT_TOP_N, is_hot
from .hot_flags import HotFlagDispatcher
from .lock import horizon_lock
from .models import RankingEpoch, ScoredStory, StatsWindow
from .scorer import calculate_bayesian_score
from .windows import load_stats_window


class RankingComputer:
    """Computes and stores rankings for each horizon."""

    def __init__(
        self,
        dispatcher: Optional[HotFlagDispatcher] = None,
        now_fn: Callable[[], datetime] = datetime.now,
        min_ratings: int = MIN_RATINGS,
        hot_top_n: int = HOT_TOP_N,
        lock_ttl_seconds: int = settings.RANKING_LOCK_TTL_SECONDS,
        lock_wait_seconds: float = settings.RANKING_LOCK_WAIT_SECONDS,
    ):
        self.dispatcher = dispatcher or HotFlagDispatcher()
        self.now_fn = now_fn
        self.min_ratings = min_ratings
        self.hot_top_n = hot_top_n
        self.lock_ttl_seconds = lock_ttl_seconds
        self.lock_wait_seconds = lock_wait_seconds

    # ============================================
    # EPOCH
    # ============================================

    async def build_epoch(self) -> RankingEpoch:
        """
        Snapshot the clock and the corpus average rating.

        The average comes from the all-time stats aggregate. If that query
        fails, the legacy story rating fields are used instead, and
        DEFAULT_AVG_RATING if those fail too or nothing is rated.
        """
        now = self.now_fn()
        today = start_of_day(now)

        try:
            async with get_session() as session:
                ratings_sum, ratings_count = await StoryStatsRepository(session).corpus_rating_totals()
            if ratings_count > 0:
                return RankingEpoch(today, now, ratings_sum / ratings_count, "stats")
            return RankingEpoch(today, now, DEFAULT_AVG_RATING, "default")
        except Exception:
            logger.exception("Corpus rating aggregation failed, falling back to story rating fields")

        try:
            async with get_session() as session:
                stars_total, count_total = await StoryRepository(session).legacy_rating_totals()
            if count_total > 0:
                return RankingEpoch(today, now, stars_total / count_total, "legacy")
        except Exception:
            logger.exception("Legacy rating aggregation failed, using default average")

        return RankingEpoch(today, now, DEFAULT_AVG_RATING, "default")

    # ============================================
    # SCORING
    # ============================================

    def score_stories(
        self,
        stories: Sequence[Story],
        window: dict[str, dict],
        epoch: RankingEpoch,
    ) -> list[ScoredStory]:
        """Score, sort and densely rank stories. Stories without stats score on zeros."""
        scored = [
            ScoredStory(
                story_id=story.id,
                score=calculate_bayesian_score(
                    story,
                    StatsWindow.from_dict(window.get(story.id)),
                    min_ratings=self.min_ratings,
                    avg_rating_all_stories=epoch.avg_rating_all_stories,
                    now=epoch.now,
                ),
            )
            for story in stories
        ]
        scored.sort(key=lambda s: (-s.score, s.story_id))
        for position, item in enumerate(scored):
            item.rank = position + 1
        return scored

    # ============================================
    # HORIZON RUNS
    # ============================================

    async def update_horizon(self, horizon: RankingHorizon, epoch: Optional[RankingEpoch] = None) -> int:
        """
        Compute and store one horizon's ranking for the epoch's day.

        Returns:
            Number of stories ranked (0 for an empty corpus, with no writes)

        Raises:
            RankingLockError: another run held the lock too long
            Exception: any store failure, after logging
        """
        epoch = epoch or await self.build_epoch()

        async with horizon_lock(
            horizon,
            ttl_seconds=self.lock_ttl_seconds,
            wait_seconds=self.lock_wait_seconds,
            now_fn=self.now_fn,
        ):
            try:
                async with get_session() as session:
                    stories = await StoryRepository(session).get_rankable()
                    if not stories:
                        logger.info(f"No eligible stories, skipping {horizon.value} ranking")
                        return 0

                    window = await load_stats_window(StoryStatsRepository(session), horizon, epoch.today)
                    scored = self.score_stories(stories, window, epoch)

                    await StoryRankingRepository(session).upsert_horizon(
                        epoch.today, horizon, [(s.story_id, s.score) for s in scored]
                    )
            except Exception:
                logger.exception(f"Error updating {horizon.value} rankings")
                raise

            hot_ids = [s.story_id for s in scored if is_hot(s.rank, self.hot_top_n)]
            cold_ids = [s.story_id for s in scored if not is_hot(s.rank, self.hot_top_n)]
            await self.dispatcher.enqueue(horizon, hot_ids, cold_ids)

        logger.info(
            f"Updated {horizon.value} rankings for {epoch.today}: {len(scored)} stories, "
            f"{len(hot_ids)} hot (avg rating {epoch.avg_rating_all_stories:.2f}, {epoch.source})"
        )
        return len(scored)

    async def update_daily_rankings(self, epoch: Optional[RankingEpoch] = None) -> int:
        return await self.update_horizon(RankingHorizon.DAILY, epoch)

    async def update_weekly_rankings(self, epoch: Optional[RankingEpoch] = None) -> int:
        return await self.update_horizon(RankingHorizon.WEEKLY, epoch)

    async def update_monthly_rankings(self, epoch: Optional[RankingEpoch] = None) -> int:
        return await self.update_horizon(RankingHorizon.MONTHLY, epoch)

    async def update_all_time_rankings(self, epoch: Optional[RankingEpoch] = None) -> int:
        return await self.update_horizon(RankingHorizon.ALL_TIME, epoch)

    async def update_all_rankings(self) -> dict[str, int]:
        """
        Run every horizon in order (daily, weekly, monthly, all-time) on one epoch.

        Returns:
            {"daily": n, "weekly": n, "monthly": n, "all_time": n}
        """
        epoch = await self.build_epoch()
        logger.info(f"Updating all rankings for {epoch.today}")

        counts = {}
        for horizon in HORIZON_ORDER:
            counts[horizon.key] = await self.update_horizon(horizon, epoch)
        return counts
