"""
Scheduler - Automated stats rollup and ranking computation

Job Schedule:
1. Daily Stats Rollup: 00:05 every day (create yesterday's missing stats rows)
2. Daily Ranking: 00:10 every day
3. Weekly Ranking: Monday 01:00
4. Monthly Ranking: 1st of the month 02:00
5. All-Time Ranking: Sunday 03:00

Usage:
    python scheduler.py                     # Run scheduler daemon
    python scheduler.py --once              # Compute all rankings once and exit
    python scheduler.py --horizon weekly    # Compute one horizon and exit
    python scheduler.py --rollup            # Run the stats rollup only
"""
import asyncio
import signal
import sys
from datetime import datetime
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.util import astimezone

from config import settings, ensure_directories
from constants import RankingHorizon, RANKING_HORIZONS
from database import init_engine, close_engine, create_tables
from processor.ranking import HotFlagDispatcher, RankingComputer
from processor.stats import StoryStatsService
from utils import logger, init_logging


# (horizon, cron kwargs, job name)
RANKING_JOBS = [
    (RankingHorizon.DAILY, {"hour": 0, "minute": 10}, "Daily Ranking"),
    (RankingHorizon.WEEKLY, {"day_of_week": "mon", "hour": 1, "minute": 0}, "Weekly Ranking"),
    (RankingHorizon.MONTHLY, {"day": 1, "hour": 2, "minute": 0}, "Monthly Ranking"),
    (RankingHorizon.ALL_TIME, {"day_of_week": "sun", "hour": 3, "minute": 0}, "All-Time Ranking"),
]


def scheduler_clock(tz) -> Callable[[], datetime]:
    """Naive wall-clock time in `tz`, matching the naive timestamps stored in the database."""
    def now() -> datetime:
        return datetime.now(tz).replace(tzinfo=None)
    return now


class RankingScheduler:
    """
    Scheduler for the ranking jobs.

    Every job logs and swallows its own failure so the next tick still fires.
    """

    def __init__(
        self,
        computer: Optional[RankingComputer] = None,
        stats_service: Optional[StoryStatsService] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
        timezone: str = settings.SCHEDULER_TIMEZONE,
    ):
        # Cron ticks and "today" are both read in this zone
        self.timezone = astimezone(timezone)
        now_fn = now_fn or scheduler_clock(self.timezone)
        self.dispatcher = computer.dispatcher if computer else HotFlagDispatcher()
        self.computer = computer or RankingComputer(dispatcher=self.dispatcher, now_fn=now_fn)
        self.stats_service = stats_service or StoryStatsService(now_fn=now_fn)
        self.scheduler = AsyncIOScheduler(timezone=self.timezone)
        self._last_results: dict[str, dict] = {}

    def setup(self):
        """Setup scheduled jobs."""
        # Job 1: Stats rollup before the daily ranking reads yesterday
        self.scheduler.add_job(
            self.run_stats_rollup,
            CronTrigger(hour=0, minute=5, timezone=self.timezone),
            id="stats_rollup",
            name="Daily Stats Rollup",
            replace_existing=True
        )

        # Jobs 2-5: One per horizon
        for horizon, cron, name in RANKING_JOBS:
            self.scheduler.add_job(
                self.run_horizon,
                CronTrigger(timezone=self.timezone, **cron),
                args=[horizon],
                id=f"ranking_{horizon.key}",
                name=name,
                replace_existing=True
            )

        logger.info(f"Scheduler setup complete with {len(RANKING_JOBS) + 1} jobs")
        self._log_schedule()

    def _log_schedule(self):
        """Log current job schedule."""
        jobs = self.scheduler.get_jobs()
        logger.info(f"Scheduled jobs ({len(jobs)}):")
        for job in jobs:
            logger.info(f"  - {job.name}: {job.trigger}")

    def _record(self, job: str, success: bool, **details) -> bool:
        self._last_results[job] = {"success": success, "at": datetime.now().isoformat(), **details}
        return success

    async def run_stats_rollup(self) -> bool:
        """Job: create yesterday's missing stats rows."""
        logger.info("Starting daily stats rollup...")
        try:
            created = await self.stats_service.rollup_daily_stats()
            return self._record("stats_rollup", True, created=created)
        except Exception as e:
            logger.exception(f"Stats rollup job failed: {e}")
            return self._record("stats_rollup", False, error=str(e))

    async def run_horizon(self, horizon: RankingHorizon) -> bool:
        """Job: compute one horizon's ranking."""
        logger.info(f"Starting {horizon.value} ranking update...")
        try:
            count = await self.computer.update_horizon(horizon)
            await self.dispatcher.drain()
            return self._record(horizon.key, True, ranked=count)
        except Exception as e:
            logger.exception(f"{horizon.value} ranking job failed: {e}")
            return self._record(horizon.key, False, error=str(e))

    async def run_all(self) -> bool:
        """Compute every horizon on one epoch."""
        logger.info("Running all ranking updates...")
        try:
            counts = await self.computer.update_all_rankings()
            await self.dispatcher.drain()
            return self._record("all", True, counts=counts)
        except Exception as e:
            logger.exception(f"Ranking update failed: {e}")
            return self._record("all", False, error=str(e))

    @property
    def last_results(self) -> dict:
        return dict(self._last_results)

    def start(self):
        """Start the scheduler. Must be called from a running event loop."""
        self.setup()
        self.scheduler.start()
        logger.info("Scheduler started - Press Ctrl+C to stop")

    async def stop(self):
        """Stop the scheduler and flush pending hot flag writes."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        await self.dispatcher.stop()
        logger.info("Scheduler stopped")


async def _prepare_database():
    ensure_directories()
    await init_engine()
    await create_tables()


async def run_scheduler():
    """Run the scheduler as main process until SIGINT/SIGTERM."""
    await _prepare_database()

    scheduler = RankingScheduler()
    scheduler.start()

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows: rely on KeyboardInterrupt
            pass

    try:
        await stop_event.wait()
        logger.info("Received shutdown signal")
    finally:
        await scheduler.stop()
        await close_engine()


async def run_once(horizon: Optional[str] = None, rollup: bool = False) -> bool:
    """Run one job (or all rankings) and exit."""
    await _prepare_database()
    scheduler = RankingScheduler()
    try:
        if rollup:
            return await scheduler.run_stats_rollup()
        if horizon:
            return await scheduler.run_horizon(RANKING_HORIZONS[horizon])
        return await scheduler.run_all()
    finally:
        await scheduler.dispatcher.stop()
        await close_engine()


def main():
    """Main entry point with CLI arguments."""
    import argparse

    parser = argparse.ArgumentParser(description="Story Ranking Scheduler")
    parser.add_argument("--once", action="store_true", help="Compute all rankings once and exit")
    parser.add_argument("--horizon", choices=list(RANKING_HORIZONS), help="Compute one horizon and exit")
    parser.add_argument("--rollup", action="store_true", help="Run the daily stats rollup and exit")

    args = parser.parse_args()

    init_logging(app_name="scheduler")

    if args.once or args.horizon or args.rollup:
        result = asyncio.run(run_once(horizon=args.horizon, rollup=args.rollup))
        sys.exit(0 if result else 1)

    # Run as daemon
    try:
        asyncio.run(run_scheduler())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
