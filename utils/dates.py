"""
Calendar helpers shared by stats and ranking code.

Stats and ranking rows are keyed by a calendar day and carry denormalized
day / month / year / iso_week fields so range queries never need date math
at read time. Month is stored 0-based (January = 0).
"""
from datetime import date, datetime, timedelta
from typing import Union


def start_of_day(value: Union[date, datetime, None] = None) -> date:
    """Truncate a datetime (or now) to its calendar day."""
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    return value


def calendar_fields(day: date) -> dict:
    """Denormalized calendar columns for a stats/ranking row."""
    return {
        "day": day.day,
        "month": day.month - 1,
        "year": day.year,
        "iso_week": day.isocalendar()[1],
    }


def iso_week_bounds(day: date) -> tuple[date, date]:
    """Monday and Sunday of the ISO week containing `day`."""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


def days_between(now: datetime, then: Union[datetime, None]) -> int:
    """Whole days elapsed from `then` to `now`, never negative. None -> 0."""
    if then is None:
        return 0
    if then.tzinfo is not None and now.tzinfo is None:
        then = then.replace(tzinfo=None)
    elif now.tzinfo is not None and then.tzinfo is None:
        now = now.replace(tzinfo=None)
    elapsed = (now - then).total_seconds() // 86400
    return max(0, int(elapsed))
