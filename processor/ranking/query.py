"""
Ranking Query Service - read side of the leaderboards.
"""
import math
from datetime import datetime
from typing import Callable, Optional

from constants import RankingHorizon
from database import get_session
from database.models import StoryRanking, HORIZON_COLUMNS, HOT_FLAG_COLUMNS
from repositories import StoryRankingRepository, StoryStatsRepository
from utils.dates import start_of_day
from .models import StatsWindow
from .windows import load_stats_window


DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class RankingQueryService:
    """Paged, category-filtered leaderboards joined with current stats."""

    def __init__(self, now_fn: Callable[[], datetime] = datetime.now):
        self.now_fn = now_fn

    async def get_rankings(
        self,
        horizon: RankingHorizon,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        category: Optional[str] = None,
    ) -> dict:
        """
        Get one page of today's leaderboard.

        `category` filters the fetched page by category slug, so a filtered
        page can hold fewer than `limit` entries. `total` counts every
        ranking row for today.
        """
        page = max(1, page)
        limit = min(max(1, limit), MAX_PAGE_SIZE)
        skip = (page - 1) * limit
        today = start_of_day(self.now_fn())

        async with get_session() as session:
            ranking_repo = StoryRankingRepository(session)
            rows = await ranking_repo.find_rankings(horizon, today, limit=limit, skip=skip)
            total = await ranking_repo.count_rankings(today)
            window = await load_stats_window(StoryStatsRepository(session), horizon, today) if rows else {}

        if category:
            rows = [r for r in rows if category in r.story.category_slugs]

        return {
            "success": True,
            "rankings": [self._format_entry(r, horizon, window.get(r.story_id)) for r in rows],
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit),
        }

    @staticmethod
    def _format_entry(row: StoryRanking, horizon: RankingHorizon, stats: Optional[dict]) -> dict:
        score_column, rank_column = HORIZON_COLUMNS[horizon]
        story = row.story
        return {
            "rank": getattr(row, rank_column),
            "score": getattr(row, score_column),
            "date": row.date.isoformat(),
            "story": {
                "id": story.id,
                "name": story.name,
                "slug": story.slug,
                "image": story.image,
                "description": story.description,
                "categories": story.categories or [],
                "author_name": story.author_name,
                "views": story.views,
                "chapter_count": story.chapter_count,
                "is_full": story.is_full,
                "is_hot": story.is_hot,
                "is_new": story.is_new,
                "hot": getattr(story, HOT_FLAG_COLUMNS[horizon]),
            },
            "stats": StatsWindow.from_dict(stats).to_dict(),
        }
