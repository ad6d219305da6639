"""
Ranking Lock Repository

Row-level advisory locks, one per horizon, with an expiry so a crashed
holder cannot block future runs forever.
"""
from datetime import datetime, timedelta

from sqlalchemy import update, delete, and_
from sqlalchemy.dialects.sqlite import insert

from database.models import RankingLock
from .base import BaseRepository


class RankingLockRepository(BaseRepository[RankingLock]):
    """Repository for ranking lock operations."""

    model = RankingLock

    async def try_acquire(self, horizon: str, token: str, now: datetime, ttl_seconds: int) -> bool:
        """
        Take the horizon's lock if it is free or expired.

        Returns:
            True if the lock now belongs to `token`
        """
        expires_at = now + timedelta(seconds=ttl_seconds)

        # Take over an expired holder
        takeover = (
            update(RankingLock)
            .where(and_(RankingLock.horizon == horizon, RankingLock.expires_at <= now))
            .values(token=token, acquired_at=now, expires_at=expires_at)
        )
        if await self.execute_write(takeover) == 1:
            return True

        # No row yet
        claim = (
            insert(RankingLock)
            .values(horizon=horizon, token=token, acquired_at=now, expires_at=expires_at)
            .on_conflict_do_nothing(index_elements=["horizon"])
        )
        return await self.execute_write(claim) == 1

    async def release(self, horizon: str, token: str) -> bool:
        """Drop the lock if `token` still holds it."""
        stmt = delete(RankingLock).where(
            and_(RankingLock.horizon == horizon, RankingLock.token == token)
        )
        return await self.execute_write(stmt) == 1
