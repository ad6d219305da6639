"""
Database Session Management

One async engine per process. The API, the scheduler and the test suite
all go through `get_session()`, which owns the transaction: a block that
exits normally commits, a block that raises rolls back. The ranking jobs
rely on that to keep a failed horizon run from writing anything.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
)
from loguru import logger

from config import settings
from .models import Base


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_database_url() -> str:
    """Async SQLite URL for the configured database file."""
    return f"sqlite+aiosqlite:///{settings.DATABASE_PATH}"


def _apply_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    # Ranking runs, view ingestion and hot flag patches write concurrently
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute(f"PRAGMA busy_timeout={settings.DATABASE_BUSY_TIMEOUT_MS}")
    cursor.close()


async def init_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Create the engine and session factory if they do not exist yet.

    Args:
        database_url: Override for the configured database (tests pass a temp file)
    """
    global _engine, _session_factory

    if _engine is not None:
        return _engine

    database_url = database_url or get_database_url()
    logger.info(f"Initializing database engine: {database_url}")

    _engine = create_async_engine(
        database_url,
        echo=settings.DATABASE_ECHO,
        connect_args={"check_same_thread": False},
    )
    if _engine.dialect.name == "sqlite":
        event.listen(_engine.sync_engine, "connect", _apply_sqlite_pragmas)

    # Objects stay readable after commit: services return them to callers
    _session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    return _engine


async def close_engine() -> None:
    """Dispose the engine. The next `init_engine` call starts fresh."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Database engine closed")


async def create_tables() -> None:
    """
    Create any missing tables from the ORM metadata.

    Used by the scheduler, by tests, and by the API when Alembic cannot run.
    """
    engine = await init_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Transactional session scope.

    Usage:
        async with get_session() as session:
            rows = await StoryRankingRepository(session).find_rankings(...)
    """
    if _session_factory is None:
        await init_engine()

    session = _session_factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
