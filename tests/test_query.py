"""Tests for the leaderboard read side."""

from constants import RankingHorizon
from processor.ranking import RankingQueryService

from .conftest import YESTERDAY, clock, make_story, add_stories, add_stats


ROMANCE = [{"name": "Romance", "slug": "romance"}]


async def seed(computer, dispatcher):
    await add_stories(
        make_story("a", categories=ROMANCE),
        make_story("b"),
        make_story("c", categories=ROMANCE),
        make_story("d"),
    )
    await add_stats("a", YESTERDAY, views=40, ratings_count=1, ratings_sum=8)
    await add_stats("b", YESTERDAY, views=30)
    await add_stats("c", YESTERDAY, views=20)
    await add_stats("d", YESTERDAY, views=10)
    await computer.update_all_rankings()
    await dispatcher.drain()


async def test_get_rankings_first_page(computer, dispatcher):
    await seed(computer, dispatcher)
    service = RankingQueryService(now_fn=clock)

    result = await service.get_rankings(RankingHorizon.DAILY, page=1, limit=3)

    assert result["success"] is True
    assert result["total"] == 4
    assert result["page"] == 1
    assert result["limit"] == 3
    assert result["total_pages"] == 2

    entry = result["rankings"][0]
    assert entry["rank"] == 1
    assert entry["story"]["id"] == "a"
    assert entry["story"]["slug"] == "story-a"
    assert entry["story"]["hot"] is True
    assert entry["stats"]["views"] == 40
    assert entry["stats"]["ratings_sum"] == 8
    assert [e["rank"] for e in result["rankings"]] == [1, 2, 3]


async def test_get_rankings_second_page(computer, dispatcher):
    await seed(computer, dispatcher)
    service = RankingQueryService(now_fn=clock)

    result = await service.get_rankings(RankingHorizon.DAILY, page=2, limit=3)

    assert [e["story"]["id"] for e in result["rankings"]] == ["d"]


async def test_category_filters_the_page(computer, dispatcher):
    await seed(computer, dispatcher)
    service = RankingQueryService(now_fn=clock)

    result = await service.get_rankings(RankingHorizon.DAILY, limit=10, category="romance")

    assert [e["story"]["id"] for e in result["rankings"]] == ["a", "c"]
    # Total is the unfiltered count for the day
    assert result["total"] == 4


async def test_stats_follow_the_horizon_window(computer, dispatcher):
    """Weekly entries carry the week's totals, not yesterday's."""
    await seed(computer, dispatcher)
    await add_stats("d", YESTERDAY.replace(day=13), views=100)
    service = RankingQueryService(now_fn=clock)

    result = await service.get_rankings(RankingHorizon.WEEKLY, limit=10)
    by_id = {e["story"]["id"]: e for e in result["rankings"]}

    assert by_id["d"]["stats"]["views"] == 110


async def test_empty_leaderboard(db):
    service = RankingQueryService(now_fn=clock)
    result = await service.get_rankings(RankingHorizon.MONTHLY)

    assert result["rankings"] == []
    assert result["total"] == 0
    assert result["total_pages"] == 0
