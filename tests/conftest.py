"""Pytest fixtures for tests."""

from datetime import datetime, date, timedelta

import pytest
import pytest_asyncio

from constants import StoryStatus, ApprovalStatus
from database import init_engine, close_engine, create_tables, get_session
from database.models import Story
from processor.ranking import HotFlagDispatcher, RankingComputer, RankingInitializer
from repositories import StoryStatsRepository


# Wednesday of ISO week 20
NOW = datetime(2024, 5, 15, 12, 0, 0)
TODAY = NOW.date()
YESTERDAY = TODAY - timedelta(days=1)


def clock() -> datetime:
    return NOW


def make_story(story_id: str, **overrides) -> Story:
    """A published, approved story updated at NOW unless overridden."""
    fields = {
        "id": story_id,
        "name": f"Story {story_id}",
        "slug": f"story-{story_id}",
        "categories": [{"name": "Action", "slug": "action"}],
        "author_name": "Author",
        "chapter_count": 0,
        "views": 0,
        "status": StoryStatus.PUBLISHED.value,
        "approval_status": ApprovalStatus.APPROVED.value,
        "created_at": NOW - timedelta(days=100),
        "updated_at": NOW,
    }
    fields.update(overrides)
    return Story(**fields)


async def add_stories(*stories: Story) -> None:
    async with get_session() as session:
        session.add_all(stories)


async def add_stats(story_id: str, day: date, **counters) -> None:
    async with get_session() as session:
        await StoryStatsRepository(session).increment(story_id, day, **counters)


@pytest_asyncio.fixture
async def db(tmp_path):
    """Fresh SQLite database per test."""
    await close_engine()
    await init_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_tables()
    yield
    await close_engine()


@pytest_asyncio.fixture
async def dispatcher(db):
    dispatcher = HotFlagDispatcher()
    yield dispatcher
    await dispatcher.stop()


@pytest_asyncio.fixture
async def computer(dispatcher):
    return RankingComputer(dispatcher=dispatcher, now_fn=clock, lock_wait_seconds=0)


@pytest.fixture
def initializer(computer):
    return RankingInitializer(computer)
