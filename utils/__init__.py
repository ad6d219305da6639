"""
Utilities module for the Story Ranking Backend.
"""
from .logger import logger, init_logging, setup_logging
from .dates import (
    start_of_day,
    calendar_fields,
    iso_week_bounds,
    days_between,
)

__all__ = [
    "logger",
    "init_logging",
    "setup_logging",
    "start_of_day",
    "calendar_fields",
    "iso_week_bounds",
    "days_between",
]
