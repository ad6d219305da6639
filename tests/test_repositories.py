"""Tests for stats, ranking and lock repositories."""

from datetime import date, timedelta

from constants import RankingHorizon
from database import get_session
from repositories import (
    StoryRepository,
    StoryStatsRepository,
    StoryRankingRepository,
    RankingLockRepository,
)

from .conftest import NOW, TODAY, make_story, add_stories, add_stats


async def test_increment_creates_row_with_calendar_fields(db):
    """First increment of the day creates the row."""
    await add_stories(make_story("a"))
    await add_stats("a", date(2024, 1, 7), views=3, unique_views=1)

    async with get_session() as session:
        row = await StoryStatsRepository(session).find_by_story_and_date("a", date(2024, 1, 7))

    assert row.views == 3
    assert row.unique_views == 1
    assert (row.day, row.month, row.year, row.iso_week) == (7, 0, 2024, 1)


async def test_increment_accumulates(db):
    await add_stories(make_story("a"))
    await add_stats("a", TODAY, views=1)
    await add_stats("a", TODAY, views=2, ratings_count=1, ratings_sum=8)

    async with get_session() as session:
        repo = StoryStatsRepository(session)
        row = await repo.find_by_story_and_date("a", TODAY)
        count = len(await repo.get_all())

    assert count == 1
    assert (row.views, row.ratings_count, row.ratings_sum) == (3, 1, 8)


async def test_week_aggregation_is_monday_to_sunday(db):
    await add_stories(make_story("a"))
    await add_stats("a", date(2024, 5, 12), views=100)  # previous Sunday
    await add_stats("a", date(2024, 5, 13), views=5)    # Monday
    await add_stats("a", date(2024, 5, 19), views=7)    # Sunday

    async with get_session() as session:
        repo = StoryStatsRepository(session)
        week = await repo.aggregate_by_week(TODAY)

    assert week["a"]["views"] == 12


async def test_month_and_all_time_aggregation(db):
    await add_stories(make_story("a"), make_story("b"))
    await add_stats("a", date(2024, 4, 30), views=10)
    await add_stats("a", date(2024, 5, 2), views=1, ratings_count=2, ratings_sum=14)
    await add_stats("b", date(2024, 5, 3), views=4)

    async with get_session() as session:
        repo = StoryStatsRepository(session)
        may = await repo.aggregate_by_month(2024, 4)
        all_time = await repo.aggregate_all_time()
        totals = await repo.corpus_rating_totals()

    assert may["a"]["views"] == 1
    assert may["b"]["views"] == 4
    assert all_time["a"]["views"] == 11
    assert all_time["a"]["ratings_sum"] == 14
    assert totals == (14, 2)


async def test_sum_for_story_since(db):
    await add_stories(make_story("a"))
    await add_stats("a", TODAY - timedelta(days=10), views=10)
    await add_stats("a", TODAY, views=1)

    async with get_session() as session:
        repo = StoryStatsRepository(session)
        assert (await repo.sum_for_story("a"))["views"] == 11
        assert (await repo.sum_for_story("a", since=TODAY - timedelta(days=7)))["views"] == 1
        assert (await repo.sum_for_story("missing"))["views"] == 0


async def test_ensure_rows_keeps_existing_counters(db):
    await add_stories(make_story("a"), make_story("b"))
    await add_stats("a", TODAY, views=9)

    async with get_session() as session:
        created = await StoryStatsRepository(session).ensure_rows(["a", "b"], TODAY)

    async with get_session() as session:
        repo = StoryStatsRepository(session)
        a = await repo.find_by_story_and_date("a", TODAY)
        b = await repo.find_by_story_and_date("b", TODAY)

    assert created == 1
    assert a.views == 9
    assert b.views == 0


async def test_upsert_horizon_and_find_rankings(db):
    await add_stories(make_story("a"), make_story("b"), make_story("c"))

    async with get_session() as session:
        repo = StoryRankingRepository(session)
        await repo.upsert_horizon(TODAY, RankingHorizon.DAILY, [("b", 9.0), ("a", 5.0), ("c", 1.0)])
        await repo.upsert_horizon(TODAY, RankingHorizon.WEEKLY, [("c", 3.0), ("a", 2.0)])

    async with get_session() as session:
        repo = StoryRankingRepository(session)
        daily = await repo.find_rankings(RankingHorizon.DAILY, TODAY, limit=10)
        weekly = await repo.find_rankings(RankingHorizon.WEEKLY, TODAY, limit=10)
        page = await repo.find_rankings(RankingHorizon.DAILY, TODAY, limit=1, skip=1)

        assert [r.story_id for r in daily] == ["b", "a", "c"]
        assert daily[0].story.name == "Story b"
        # Rank 0 rows are returned, ahead of ranked ones
        assert [(r.story_id, r.weekly_rank) for r in weekly] == [("b", 0), ("c", 1), ("a", 2)]
        assert [r.story_id for r in page] == ["a"]

        assert await repo.count_rankings(TODAY) == 3
        assert await repo.count_ranked(TODAY, RankingHorizon.DAILY) == 3
        assert await repo.count_ranked(TODAY, RankingHorizon.WEEKLY) == 2
        assert await repo.count_ranked(TODAY, RankingHorizon.MONTHLY) == 0


async def test_upsert_horizon_resets_dropped_stories(db):
    """A story missing from a rerun loses its rank for that horizon only."""
    await add_stories(make_story("a"), make_story("b"))

    async with get_session() as session:
        repo = StoryRankingRepository(session)
        await repo.upsert_horizon(TODAY, RankingHorizon.DAILY, [("a", 2.0), ("b", 1.0)])
        await repo.upsert_horizon(TODAY, RankingHorizon.WEEKLY, [("b", 4.0)])
        await repo.upsert_horizon(TODAY, RankingHorizon.DAILY, [("a", 3.0)])

    async with get_session() as session:
        b = await StoryRankingRepository(session).find_by_story_and_date("b", TODAY)

    assert (b.daily_rank, b.daily_score) == (0, 0.0)
    assert (b.weekly_rank, b.weekly_score) == (1, 4.0)


async def test_set_hot_flags_keeps_updated_at(db):
    updated = NOW - timedelta(days=3)
    await add_stories(make_story("a", updated_at=updated), make_story("b", updated_at=updated, hot_day=True))

    async with get_session() as session:
        touched = await StoryRepository(session).set_hot_flags(RankingHorizon.DAILY, ["a"], ["b"])

    async with get_session() as session:
        repo = StoryRepository(session)
        a, b = await repo.get("a"), await repo.get("b")

    assert touched == 2
    assert a.hot_day is True
    assert b.hot_day is False
    assert a.updated_at == updated
    assert b.updated_at == updated


async def test_lock_acquire_release_and_takeover(db):
    async with get_session() as session:
        repo = RankingLockRepository(session)
        assert await repo.try_acquire("daily", "one", NOW, 60)
        assert not await repo.try_acquire("daily", "two", NOW, 60)
        # Other horizons are independent
        assert await repo.try_acquire("weekly", "two", NOW, 60)
        # Expired holder is taken over
        assert await repo.try_acquire("daily", "three", NOW + timedelta(seconds=61), 60)
        # Stale token cannot release the new holder's lock
        assert not await repo.release("daily", "one")
        assert await repo.release("daily", "three")
        assert await repo.try_acquire("daily", "four", NOW, 60)


async def test_increment_clamps_counters_at_zero(db):
    await add_stories(make_story("a"))
    await add_stats("a", TODAY, ratings_count=1, ratings_sum=3)

    async with get_session() as session:
        row = await StoryStatsRepository(session).increment("a", TODAY, ratings_sum=-5)

    assert (row.ratings_count, row.ratings_sum) == (1, 0)
