"""Tests for view and rating ingestion."""

import asyncio
from datetime import timedelta

import pytest

from constants import TimeRange, StoryStatus
from database import get_session
from processor.ranking import StoryNotFoundError, InvalidRatingError
from processor.stats import StoryStatsService
from repositories import StoryRepository, StoryStatsRepository

from .conftest import TODAY, YESTERDAY, clock, make_story, add_stories, add_stats


@pytest.fixture
def service(db):
    return StoryStatsService(now_fn=clock)


async def test_record_view(service):
    await add_stories(make_story("a", views=10))

    await service.record_view("a")
    result = await service.record_view("a", unique=True)

    assert result["views"] == 2
    assert result["unique_views"] == 1
    assert result["date"] == TODAY.isoformat()

    async with get_session() as session:
        story = await StoryRepository(session).get("a")
    assert story.views == 12


async def test_record_view_keeps_updated_at(service):
    story = make_story("a")
    await add_stories(story)
    await service.record_view("a")

    async with get_session() as session:
        reloaded = await StoryRepository(session).get("a")
    assert reloaded.updated_at == story.updated_at


async def test_record_view_unknown_story(service):
    with pytest.raises(StoryNotFoundError):
        await service.record_view("nope")


async def test_record_and_edit_rating(service):
    await add_stories(make_story("a"))

    await service.record_rating("a", 8)
    await service.record_rating("a", 4)
    stats = await service.record_rating("a", 10, previous_rating=4)

    assert stats == {"ratings_count": 2, "ratings_sum": 18, "average_rating": 9.0}


@pytest.mark.parametrize("rating", [0, 11, -1, 5.5, True, "7"])
async def test_invalid_rating(service, rating):
    await add_stories(make_story("a"))
    with pytest.raises(InvalidRatingError):
        await service.record_rating("a", rating)


async def test_invalid_previous_rating(service):
    await add_stories(make_story("a"))
    with pytest.raises(InvalidRatingError):
        await service.record_rating("a", 5, previous_rating=12)


async def test_rating_stats_without_ratings(service):
    await add_stories(make_story("a"))
    assert await service.get_rating_stats("a") == {"ratings_count": 0, "ratings_sum": 0, "average_rating": 0}


async def test_views_by_time_range(service):
    await add_stories(make_story("a"))
    for days_ago, views in ((0, 1), (5, 10), (20, 100), (100, 1000), (400, 10000)):
        await add_stats("a", TODAY - timedelta(days=days_ago), views=views)

    assert await service.get_views_by_time_range("a", TimeRange.DAY) == 1
    assert await service.get_views_by_time_range("a", TimeRange.WEEK) == 11
    assert await service.get_views_by_time_range("a", TimeRange.MONTH) == 111
    assert await service.get_views_by_time_range("a", TimeRange.YEAR) == 1111
    assert await service.get_views_by_time_range("a", TimeRange.ALL) == 11111
    assert await service.get_views_by_time_range("a", "week") == 11
    assert await service.get_total_views("a") == 11111


async def test_all_stats(service):
    await add_stories(make_story("a"))
    await service.record_view("a")
    await service.record_rating("a", 6)

    result = await service.get_all_stats("a")

    assert result["total_views"] == 1
    assert result["ratings"]["average_rating"] == 6.0
    assert result["views_by_time_range"]["day"] == 1
    assert result["daily_stats"]["ratings_count"] == 1


async def test_rollup_creates_missing_rows_only(service):
    await add_stories(
        make_story("a"),
        make_story("b"),
        make_story("draft", status=StoryStatus.DRAFT.value),
    )
    await add_stats("a", YESTERDAY, views=7)

    assert await service.rollup_daily_stats() == 1
    assert await service.rollup_daily_stats() == 0

    async with get_session() as session:
        repo = StoryStatsRepository(session)
        a = await repo.find_by_story_and_date("a", YESTERDAY)
        b = await repo.find_by_story_and_date("b", YESTERDAY)
        draft = await repo.find_by_story_and_date("draft", YESTERDAY)

    assert a.views == 7
    assert b.views == 0
    assert draft is None


async def test_concurrent_views_all_counted(service):
    await add_stories(make_story("a"))
    await add_stats("a", TODAY, views=1)

    await asyncio.gather(*(service.record_view("a") for _ in range(10)))

    assert await service.get_total_views("a") == 11


async def test_concurrent_first_views_of_the_day(service):
    """Simultaneous first views create one row and none of them fail."""
    await add_stories(make_story("b"))

    results = await asyncio.gather(*(service.record_view("b") for _ in range(5)))

    assert all(r["story_id"] == "b" for r in results)
    async with get_session() as session:
        rows = await StoryStatsRepository(session).get_all()
        story = await StoryRepository(session).get("b")
    assert [(r.story_id, r.views) for r in rows] == [("b", 5)]
    assert story.views == 5


async def test_concurrent_ratings_all_counted(service):
    await add_stories(make_story("a"))

    await asyncio.gather(*(service.record_rating("a", r) for r in (2, 4, 6, 8)))

    stats = await service.get_rating_stats("a")
    assert stats == {"ratings_count": 4, "ratings_sum": 20, "average_rating": 5.0}
