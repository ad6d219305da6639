"""Tests for scheduled job registration and job error handling."""

from datetime import datetime, timedelta, timezone

from constants import RankingHorizon
from scheduler import RankingScheduler

from .conftest import clock, make_story, add_stories


def trigger_fields(job) -> dict:
    return {field.name: str(field) for field in job.trigger.fields}


def test_jobs_registered():
    scheduler = RankingScheduler(now_fn=clock)
    scheduler.setup()

    jobs = {job.id: job for job in scheduler.scheduler.get_jobs()}
    assert set(jobs) == {
        "stats_rollup",
        "ranking_daily",
        "ranking_weekly",
        "ranking_monthly",
        "ranking_all_time",
    }

    rollup = trigger_fields(jobs["stats_rollup"])
    assert (rollup["hour"], rollup["minute"]) == ("0", "5")

    daily = trigger_fields(jobs["ranking_daily"])
    assert (daily["hour"], daily["minute"]) == ("0", "10")

    weekly = trigger_fields(jobs["ranking_weekly"])
    assert (weekly["day_of_week"], weekly["hour"]) == ("mon", "1")

    monthly = trigger_fields(jobs["ranking_monthly"])
    assert (monthly["day"], monthly["hour"]) == ("1", "2")

    all_time = trigger_fields(jobs["ranking_all_time"])
    assert (all_time["day_of_week"], all_time["hour"]) == ("sun", "3")


async def test_jobs_run_and_record(computer):
    await add_stories(make_story("a"))
    scheduler = RankingScheduler(computer=computer, now_fn=clock)

    assert await scheduler.run_stats_rollup() is True
    assert await scheduler.run_all() is True
    assert scheduler.last_results["all"]["counts"]["daily"] == 1
    assert scheduler.last_results["stats_rollup"]["created"] == 1


async def test_failed_job_is_swallowed(computer, monkeypatch):
    scheduler = RankingScheduler(computer=computer)

    async def broken(horizon, epoch=None):
        raise RuntimeError("store offline")

    monkeypatch.setattr(computer, "update_horizon", broken)

    assert await scheduler.run_horizon(RankingHorizon.WEEKLY) is False
    assert scheduler.last_results["weekly"] == {
        "success": False,
        "at": scheduler.last_results["weekly"]["at"],
        "error": "store offline",
    }


def test_triggers_and_clock_share_the_configured_zone():
    scheduler = RankingScheduler(timezone="Asia/Ho_Chi_Minh")
    scheduler.setup()

    for job in scheduler.scheduler.get_jobs():
        assert str(job.trigger.timezone) == "Asia/Ho_Chi_Minh"

    # UTC+7 with no DST
    wall = scheduler.computer.now_fn()
    expected = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(hours=7)
    assert wall.tzinfo is None
    assert abs((wall - expected).total_seconds()) < 5
    assert abs((scheduler.stats_service.now_fn() - expected).total_seconds()) < 5
