"""
Hot flag dispatcher.

After a horizon's rankings commit, the story table's hot_<horizon> flags
are patched on a background worker. Jobs go through a bounded queue so a
burst of runs applies back-pressure instead of piling up tasks, and
callers can `drain()` to wait until every queued patch has been applied.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from config import settings
from constants import RankingHorizon
from database import get_session
from repositories import StoryRepository


@dataclass
class HotFlagJob:
    horizon: RankingHorizon
    hot_ids: list[str] = field(default_factory=list)
    cold_ids: list[str] = field(default_factory=list)


class HotFlagDispatcher:
    """Single worker applying hot flag patches in enqueue order."""

    def __init__(self, maxsize: int = settings.RANKING_HOT_FLAG_QUEUE_SIZE):
        self.maxsize = maxsize
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None
        self.applied = 0
        self.failed = 0

    def _ensure_worker(self) -> None:
        if self._queue is None:
            self._queue = asyncio.Queue(maxsize=self.maxsize)
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="hot-flag-dispatcher")

    async def enqueue(self, horizon: RankingHorizon, hot_ids: list[str], cold_ids: list[str]) -> None:
        """Queue a patch. Waits if the queue is full."""
        self._ensure_worker()
        await self._queue.put(HotFlagJob(horizon, list(hot_ids), list(cold_ids)))

    async def drain(self) -> None:
        """Wait until every queued patch has been applied (or has failed)."""
        if self._queue is not None:
            await self._queue.join()

    async def stop(self) -> None:
        """Drain, then stop the worker."""
        await self.drain()
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None

    @property
    def pending(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    async def _run(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self._apply(job)
                self.applied += 1
            except Exception:
                self.failed += 1
                logger.exception(f"Failed to update hot flags for {job.horizon.value}")
            finally:
                self._queue.task_done()

    async def _apply(self, job: HotFlagJob) -> None:
        async with get_session() as session:
            touched = await StoryRepository(session).set_hot_flags(job.horizon, job.hot_ids, job.cold_ids)
        logger.debug(
            f"Hot flags {job.horizon.value}: {len(job.hot_ids)} hot, "
            f"{len(job.cold_ids)} cleared ({touched} rows)"
        )
