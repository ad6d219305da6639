"""
Ranking Initializer

Makes sure today's rankings exist. Runs at application startup and again
whenever the availability guard finds a horizon empty. Never raises:
failures come back as {"success": False, "error": ...}.
"""
import asyncio
from datetime import date, datetime
from typing import Callable, Optional

from loguru import logger

from constants import HORIZON_ORDER
from database import get_session
from repositories import StoryRankingRepository
from utils.dates import start_of_day
from .computer import RankingComputer


class RankingInitializer:
    """Creates initial rankings when any horizon is missing for today."""

    def __init__(self, computer: RankingComputer, now_fn: Optional[Callable[[], datetime]] = None):
        self.computer = computer
        self.now_fn = now_fn or computer.now_fn
        self.last_result: Optional[dict] = None
        self.last_run_at: Optional[datetime] = None
        self._lock = asyncio.Lock()

    def today(self) -> date:
        return start_of_day(self.now_fn())

    async def check_existing_rankings(self, day: Optional[date] = None) -> dict:
        """
        Count today's ranked rows per horizon.

        Returns:
            {"daily": n, "weekly": n, "monthly": n, "all_time": n, "total": n}
            where total counts every row for the day, ranked or not
        """
        day = day or self.today()
        async with get_session() as session:
            repo = StoryRankingRepository(session)
            stats = {h.key: await repo.count_ranked(day, h) for h in HORIZON_ORDER}
            stats["total"] = await repo.count_rankings(day)
        return stats

    @staticmethod
    def should_initialize(stats: dict) -> bool:
        """True if any horizon has no ranked rows."""
        return any(stats.get(h.key, 0) == 0 for h in HORIZON_ORDER)

    async def create_initial_rankings(self) -> dict[str, int]:
        """Compute all four horizons (daily, weekly, monthly, all-time)."""
        logger.info("Creating initial rankings")
        counts = await self.computer.update_all_rankings()
        logger.info(f"Initial rankings created: {counts}")
        return counts

    async def initialize_on_startup(self) -> dict:
        """
        Compute rankings if any horizon is missing for today.

        Concurrent callers in this process share one run: the second caller
        waits and then sees the rows the first one wrote.

        Returns:
            {"success": True, "created": True, "counts": {...}} after a run,
            {"success": True, "created": False, "message": ..., "stats": {...}} if nothing was needed,
            {"success": False, "error": ...} on failure
        """
        async with self._lock:
            try:
                stats = await self.check_existing_rankings()
                if not self.should_initialize(stats):
                    logger.info(f"Rankings already exist for today: {stats}")
                    result = {
                        "success": True,
                        "created": False,
                        "message": "Rankings already exist for today",
                        "stats": stats,
                    }
                else:
                    logger.info(f"Missing rankings detected: {stats}")
                    counts = await self.create_initial_rankings()
                    result = {"success": True, "created": True, "counts": counts}
            except Exception as e:
                logger.exception("Ranking initialization failed")
                result = {"success": False, "error": str(e)}

            self.last_result = result
            self.last_run_at = self.now_fn()
            return result

    async def validate_ranking_apis(self) -> dict:
        """
        Check that every horizon's leaderboard query returns rows for today.

        Returns:
            {"success": True, "validation": {"daily": bool, ...}} or
            {"success": False, "error": ...}
        """
        try:
            today = self.today()
            async with get_session() as session:
                repo = StoryRankingRepository(session)
                validation = {
                    h.key: len(await repo.find_rankings(h, today, limit=1, skip=0)) > 0
                    for h in HORIZON_ORDER
                }
            return {"success": True, "validation": validation}
        except Exception as e:
            logger.exception("Ranking validation failed")
            return {"success": False, "error": str(e)}

    async def get_status(self, guard_state: Optional[dict] = None) -> dict:
        """Health snapshot for the status endpoint."""
        try:
            stats = await self.check_existing_rankings()
        except Exception as e:
            logger.exception("Failed to read ranking counts")
            return {"success": False, "error": str(e)}

        return {
            "success": True,
            "date": self.today().isoformat(),
            "stats": stats,
            "needs_initialization": self.should_initialize(stats),
            "validation": await self.validate_ranking_apis(),
            "last_initialization": {
                "result": self.last_result,
                "ran_at": self.last_run_at.isoformat() if self.last_run_at else None,
            },
            "guard": guard_state or {},
        }
