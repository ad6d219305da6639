"""
Ranking Availability Guard

Request-time self-healing for the leaderboard endpoints. If today's
rankings are missing (first request after midnight, cron missed, fresh
database), the guard rebuilds them inline before the request is served.
"""
import time
from typing import Callable, Optional

from loguru import logger

from config import settings
from constants import RankingHorizon
from database import get_session
from repositories import StoryRankingRepository
from .errors import RankingUnavailableError
from .initializer import RankingInitializer


class RankingAvailabilityGuard:
    """
    Readiness check with an in-process cache.

    `ensure_ready` is cheap once the cache is warm. `validate_horizon`
    always checks the requested horizon, since a horizon can be missing
    while others exist.
    """

    def __init__(
        self,
        initializer: RankingInitializer,
        cache_seconds: float = settings.RANKING_GUARD_CACHE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.initializer = initializer
        self.cache_seconds = cache_seconds
        self.clock = clock
        self._ready_until: float = 0.0
        self._last_check: Optional[float] = None

    @property
    def is_cached(self) -> bool:
        return self.clock() < self._ready_until

    async def ensure_ready(self) -> None:
        """
        Make sure some rankings exist for today.

        Runs the initializer inline when the day has no rows. Failures are
        logged and the request continues.
        """
        if self.is_cached:
            return

        try:
            async with get_session() as session:
                count = await StoryRankingRepository(session).count_rankings(self.initializer.today())

            if count == 0:
                logger.warning("No rankings found for today, initializing")
                result = await self.initializer.initialize_on_startup()
                if not result.get("success"):
                    logger.error(f"Ranking initialization failed: {result.get('error')}")

            self._last_check = self.clock()
            self._ready_until = self._last_check + self.cache_seconds
        except Exception:
            # Not cached: the next request checks again
            logger.exception("Ranking readiness check failed")

    async def validate_horizon(self, horizon: RankingHorizon) -> None:
        """
        Make sure the horizon has ranked rows for today.

        Raises:
            RankingUnavailableError: rows were missing and re-initialization failed
        """
        try:
            async with get_session() as session:
                count = await StoryRankingRepository(session).count_ranked(self.initializer.today(), horizon)
        except Exception:
            logger.exception(f"Ranking check failed for {horizon.value}")
            return

        if count > 0:
            return

        logger.warning(f"No {horizon.value} rankings for today, re-initializing")
        result = await self.initializer.initialize_on_startup()
        if not result.get("success"):
            raise RankingUnavailableError(
                f"{horizon.value} rankings are unavailable: {result.get('error', 'initialization failed')}"
            )

    def clear_cache(self) -> None:
        """Forget readiness so the next request re-checks."""
        self._ready_until = 0.0
        logger.debug("Ranking guard cache cleared")

    def cache_state(self) -> dict:
        remaining = max(0.0, self._ready_until - self.clock())
        return {
            "ready": self.is_cached,
            "expires_in_seconds": round(remaining, 1),
            "cache_seconds": self.cache_seconds,
        }
