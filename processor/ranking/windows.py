"""
Stats aggregation windows per ranking horizon.

- daily: yesterday's rows
- weekly: the ISO week (Monday..Sunday) containing today
- monthly: today's calendar month
- all-time: every row
"""
from datetime import date, timedelta

from constants import RankingHorizon
from repositories import StoryStatsRepository


async def load_stats_window(
    stats_repo: StoryStatsRepository,
    horizon: RankingHorizon,
    today: date,
) -> dict[str, dict]:
    """Aggregate counters per story for the horizon's window ending `today`."""
    if horizon == RankingHorizon.DAILY:
        return await stats_repo.aggregate_by_date(today - timedelta(days=1))
    if horizon == RankingHorizon.WEEKLY:
        return await stats_repo.aggregate_by_week(today)
    if horizon == RankingHorizon.MONTHLY:
        return await stats_repo.aggregate_by_month(today.year, today.month - 1)
    return await stats_repo.aggregate_all_time()
