"""
Database Module - Story Ranking Backend

Structure:
    database/
    ├── __init__.py      # This file - public API
    ├── session.py       # SQLAlchemy async session management
    ├── init.py          # Database initialization utilities
    └── models/          # SQLAlchemy ORM models
        ├── __init__.py
        ├── base.py
        ├── story.py
        ├── story_stats.py
        ├── story_rankings.py
        └── system.py

Usage:
    from database import get_session
    from database.models import Story, StoryRanking

    async with get_session() as session:
        result = await session.execute(select(Story))
        stories = result.scalars().all()
"""

# SQLAlchemy Models
from .models import (
    Base,
    TimestampMixin,
    Story,
    StoryStats,
    StoryRanking,
    RankingLock,
)

# Session Management
from .session import (
    init_engine,
    close_engine,
    create_tables,
    get_session,
)

# Initialization utilities
from .init import (
    get_table_counts_async,
    run_migrations,
)

__all__ = [
    # SQLAlchemy Models
    "Base",
    "TimestampMixin",
    "Story",
    "StoryStats",
    "StoryRanking",
    "RankingLock",
    # Session Management
    "init_engine",
    "close_engine",
    "create_tables",
    "get_session",
    # Init utilities
    "get_table_counts_async",
    "run_migrations",
]
