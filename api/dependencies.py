"""
API Dependencies - service container, admin check and ranking guards.
"""
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, Request

from config import settings
from constants import RankingHorizon, RANKING_HORIZONS
from processor.ranking import (
    HotFlagDispatcher,
    RankingComputer,
    RankingInitializer,
    RankingAvailabilityGuard,
    RankingQueryService,
    RankingUnavailableError,
)
from processor.stats import StoryStatsService


@dataclass
class RankingServices:
    """Everything the routes need, built once per app."""
    dispatcher: HotFlagDispatcher
    computer: RankingComputer
    initializer: RankingInitializer
    guard: RankingAvailabilityGuard
    query: RankingQueryService
    stats: StoryStatsService


def build_services(now_fn: Callable[[], datetime] = datetime.now, **computer_options) -> RankingServices:
    """Wire the ranking services around one dispatcher and one clock."""
    dispatcher = HotFlagDispatcher()
    computer = RankingComputer(dispatcher=dispatcher, now_fn=now_fn, **computer_options)
    initializer = RankingInitializer(computer)
    return RankingServices(
        dispatcher=dispatcher,
        computer=computer,
        initializer=initializer,
        guard=RankingAvailabilityGuard(initializer),
        query=RankingQueryService(now_fn=now_fn),
        stats=StoryStatsService(now_fn=now_fn),
    )


def get_services(request: Request) -> RankingServices:
    services = getattr(request.app.state, "rankings", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Ranking services not initialized")
    return services


def parse_horizon(horizon: str) -> RankingHorizon:
    """URL segment -> RankingHorizon, 404 for anything else."""
    if horizon not in RANKING_HORIZONS:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown ranking horizon '{horizon}'. Use one of: {', '.join(RANKING_HORIZONS)}",
        )
    return RANKING_HORIZONS[horizon]


async def require_admin(x_admin_key: Optional[str] = Header(default=None)) -> None:
    """
    Admin check for update endpoints.

    Open when ADMIN_API_KEY is empty (development).
    """
    if not settings.ADMIN_API_KEY:
        return
    if not x_admin_key or not secrets.compare_digest(x_admin_key, settings.ADMIN_API_KEY):
        raise HTTPException(status_code=403, detail="Admin key required")


async def ranked_horizon(
    horizon: str,
    services: RankingServices = Depends(get_services),
) -> RankingHorizon:
    """
    Resolve the horizon and make sure today's leaderboard exists for it.

    Rebuilds missing rankings inline; 503 if that fails.
    """
    resolved = parse_horizon(horizon)
    await services.guard.ensure_ready()
    try:
        await services.guard.validate_horizon(resolved)
    except RankingUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return resolved
