"""
Database Initialization and Utilities

Table counts for health checks and the Alembic upgrade wrapper used at
API startup.
"""
from loguru import logger


async def get_table_counts_async() -> dict:
    """
    Get row counts for all tables.

    Returns:
        Dict with table names and row counts
    """
    from sqlalchemy import select, func
    from .models import Story, StoryStats, StoryRanking, RankingLock
    from .session import get_session

    counts = {}
    async with get_session() as session:
        for model in (Story, StoryStats, StoryRanking, RankingLock):
            result = await session.execute(select(func.count()).select_from(model))
            counts[model.__tablename__] = result.scalar_one()

    return counts


def run_migrations() -> None:
    """
    Run pending Alembic migrations.

    This is a convenience wrapper around Alembic upgrade command.
    """
    from alembic.config import Config
    from alembic import command
    from config import settings

    alembic_cfg = Config(str(settings.BASE_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(settings.BASE_DIR / "migrations"))
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")
