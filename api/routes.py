"""
API Routes - All endpoint definitions for the Story Ranking Backend

Endpoints organized by:
- Health Check
- Rankings (leaderboards, status, admin updates)
- Story Stats (views, ratings)
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from pydantic import BaseModel, Field

from config import settings
from constants import RankingHorizon, TimeRange
from database import get_table_counts_async
from processor.ranking import RankingLockError, StatsError
from .dependencies import (
    RankingServices,
    get_services,
    parse_horizon,
    ranked_horizon,
    require_admin,
)

router = APIRouter()


class RatingRequest(BaseModel):
    story_id: str
    rating: int = Field(description="1..10")
    previous_rating: Optional[int] = Field(default=None, description="Set when editing an earlier rating")


def _stats_http_error(e: StatsError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=str(e))


# ============================================================
# Health Check
# ============================================================
@router.get("/health")
async def health_check():
    """Health check endpoint."""
    result = {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "database": str(settings.DATABASE_PATH),
    }
    try:
        result["tables"] = await get_table_counts_async()
    except Exception as e:
        logger.error(f"Health check could not read tables: {e}")
        result["status"] = "degraded"
    return result


# ============================================================
# Rankings
# ============================================================
@router.get("/rankings/status")
async def ranking_status(services: RankingServices = Depends(get_services)):
    """
    Ranking health snapshot.

    Today's ranked counts per horizon, whether initialization is needed,
    query validation, the last initialization result and guard cache state.
    """
    return await services.initializer.get_status(guard_state=services.guard.cache_state())


@router.post("/rankings/update/{horizon}", dependencies=[Depends(require_admin)])
async def update_rankings(horizon: str, services: RankingServices = Depends(get_services)):
    """
    Recompute one horizon, or every horizon with `all`.

    Waits for hot flags to be applied before responding.
    """
    try:
        if horizon == "all":
            counts = await services.computer.update_all_rankings()
        else:
            resolved = parse_horizon(horizon)
            counts = {resolved.key: await services.computer.update_horizon(resolved)}
        await services.dispatcher.drain()
    except HTTPException:
        raise
    except RankingLockError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Ranking update failed for {horizon}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    services.guard.clear_cache()
    return {
        "success": True,
        "counts": counts,
        "timestamp": datetime.now().isoformat(),
    }


@router.post("/rankings/force-update", dependencies=[Depends(require_admin)])
async def force_update_rankings(services: RankingServices = Depends(get_services)):
    """Recompute every horizon and reset the guard cache."""
    try:
        counts = await services.computer.update_all_rankings()
        await services.dispatcher.drain()
    except RankingLockError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Forced ranking update failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    services.guard.clear_cache()
    return {
        "success": True,
        "message": "All rankings updated",
        "counts": counts,
        "timestamp": datetime.now().isoformat(),
    }


@router.get("/rankings/{horizon}")
async def get_rankings(
    resolved: RankingHorizon = Depends(ranked_horizon),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    category: Optional[str] = Query(default=None, description="Category slug"),
    services: RankingServices = Depends(get_services),
):
    """
    Today's leaderboard for daily / weekly / monthly / all-time.

    Missing rankings are rebuilt before the page is served.
    """
    try:
        return await services.query.get_rankings(resolved, page=page, limit=limit, category=category)
    except Exception as e:
        logger.error(f"Error getting {resolved.value} rankings: {e}")
        raise HTTPException(status_code=500, detail=str(e))


# ============================================================
# Story Stats
# ============================================================
@router.get("/story-stats/views/{story_id}")
async def get_total_views(story_id: str, services: RankingServices = Depends(get_services)):
    """Lifetime views summed from daily stats."""
    try:
        total = await services.stats.get_total_views(story_id)
    except StatsError as e:
        raise _stats_http_error(e)
    return {"success": True, "story_id": story_id, "total_views": total}


@router.get("/story-stats/views/{story_id}/time-range")
async def get_views_by_time_range(
    story_id: str,
    time_range: TimeRange = Query(default=TimeRange.ALL),
    services: RankingServices = Depends(get_services),
):
    """Views over day / week / month / year / all."""
    try:
        views = await services.stats.get_views_by_time_range(story_id, time_range)
    except StatsError as e:
        raise _stats_http_error(e)
    return {"success": True, "story_id": story_id, "time_range": time_range.value, "views": views}


@router.post("/story-stats/views/{story_id}")
async def record_view(
    story_id: str,
    unique: bool = Query(default=False, description="Count as a unique view too"),
    services: RankingServices = Depends(get_services),
):
    """Count one view for today."""
    try:
        result = await services.stats.record_view(story_id, unique=unique)
    except StatsError as e:
        raise _stats_http_error(e)
    return {"success": True, **result}


@router.get("/story-stats/ratings/{story_id}")
async def get_rating_stats(story_id: str, services: RankingServices = Depends(get_services)):
    """Rating count, sum and average."""
    try:
        stats = await services.stats.get_rating_stats(story_id)
    except StatsError as e:
        raise _stats_http_error(e)
    return {"success": True, "story_id": story_id, **stats}


@router.post("/story-stats/ratings")
async def rate_story(request: RatingRequest, services: RankingServices = Depends(get_services)):
    """Record a rating, or edit one when previous_rating is given."""
    try:
        stats = await services.stats.record_rating(
            request.story_id, request.rating, previous_rating=request.previous_rating
        )
    except StatsError as e:
        raise _stats_http_error(e)
    return {"success": True, "story_id": request.story_id, **stats}


@router.get("/story-stats/{story_id}")
async def get_all_stats(story_id: str, services: RankingServices = Depends(get_services)):
    """Every stat for a story in one call."""
    try:
        stats = await services.stats.get_all_stats(story_id)
    except StatsError as e:
        raise _stats_http_error(e)
    return {"success": True, "story_id": story_id, **stats}
