"""
Per-horizon advisory lock.

A run holds the horizon's row in `ranking_locks` for the duration of its
computation. Rows past their expiry are treated as abandoned and taken
over, so a crashed holder blocks at most one TTL.
"""
import asyncio
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncGenerator, Callable

from loguru import logger

from config import settings
from constants import RankingHorizon
from database import get_session
from repositories import RankingLockRepository
from .errors import RankingLockError


@asynccontextmanager
async def horizon_lock(
    horizon: RankingHorizon,
    ttl_seconds: int = settings.RANKING_LOCK_TTL_SECONDS,
    wait_seconds: float = settings.RANKING_LOCK_WAIT_SECONDS,
    poll_interval: float = 0.5,
    now_fn: Callable[[], datetime] = datetime.now,
) -> AsyncGenerator[str, None]:
    """
    Hold the horizon's lock for the body of the block.

    Usage:
        async with horizon_lock(RankingHorizon.DAILY):
            ...

    Raises:
        RankingLockError: lock still held by another run after wait_seconds
    """
    token = uuid.uuid4().hex
    started = time.monotonic()

    while True:
        async with get_session() as session:
            acquired = await RankingLockRepository(session).try_acquire(
                horizon.value, token, now_fn(), ttl_seconds
            )
        if acquired:
            break

        waited = time.monotonic() - started
        if waited >= wait_seconds:
            logger.warning(f"Ranking lock busy for {horizon.value}, gave up after {waited:.1f}s")
            raise RankingLockError(horizon.value, waited)
        await asyncio.sleep(poll_interval)

    logger.debug(f"Acquired ranking lock {horizon.value} ({token[:8]})")
    try:
        yield token
    finally:
        try:
            async with get_session() as session:
                await RankingLockRepository(session).release(horizon.value, token)
            logger.debug(f"Released ranking lock {horizon.value} ({token[:8]})")
        except Exception:
            # Left to expire via TTL
            logger.exception(f"Failed to release ranking lock {horizon.value}")
