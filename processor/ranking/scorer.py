"""
Bayesian popularity score for a story.

The score blends raw engagement (views, bookmarks, comments) with a
Bayesian-smoothed rating so that a handful of 10/10 votes cannot outrank
a story with hundreds of solid ratings. Engagement decays with the time
since the story was last updated.

Pure function: no I/O, no clock unless `now` is omitted.
"""
from datetime import datetime
from typing import Any, Optional, Union

from utils.dates import days_between
from .config import (
    MIN_RATINGS,
    DEFAULT_AVG_RATING,
    RATING_SCALE,
    RATED_WEIGHTS,
    UNRATED_WEIGHTS,
    RATED_BLEND,
    UNRATED_BLEND,
    MIN_SCORE,
    get_decay_factor,
)
from .models import StatsWindow


def bayesian_rating(
    ratings_count: int,
    avg_rating: float,
    min_ratings: int = MIN_RATINGS,
    avg_rating_all_stories: float = DEFAULT_AVG_RATING,
) -> float:
    """
    Story rating pulled toward the corpus mean.

    With few ratings the corpus mean dominates; as ratings_count grows the
    result moves toward the story's own average. Unrated stories get half
    the corpus mean.
    """
    if ratings_count <= 0:
        return avg_rating_all_stories / 2
    total = ratings_count + min_ratings
    return (ratings_count / total) * avg_rating + (min_ratings / total) * avg_rating_all_stories


def calculate_bayesian_score(
    story: Any,
    stats: Union[StatsWindow, dict, None] = None,
    min_ratings: int = MIN_RATINGS,
    avg_rating_all_stories: float = DEFAULT_AVG_RATING,
    now: Optional[datetime] = None,
) -> float:
    """
    Score a story for one horizon.

    Args:
        story: Object with `updated_at` and `chapter_count`
        stats: Aggregated counters for the horizon's window (None = all zero)
        min_ratings: Confidence constant m
        avg_rating_all_stories: Corpus mean rating
        now: Reference time for decay

    Returns:
        Score, never below 1
    """
    if not isinstance(stats, StatsWindow):
        stats = StatsWindow.from_dict(stats)
    now = now or datetime.now()

    ratings_count = stats.ratings_count
    avg_rating = stats.average_rating
    has_ratings = ratings_count > 0

    bayesian = bayesian_rating(ratings_count, avg_rating, min_ratings, avg_rating_all_stories)

    # Base engagement
    if has_ratings:
        w = RATED_WEIGHTS
        base = (
            stats.views * w["views"]
            + avg_rating * RATING_SCALE * w["avg_rating"]
            + stats.bookmarks_count * w["bookmarks"]
            + stats.comments_count * w["comments"]
        )
    else:
        w = UNRATED_WEIGHTS
        chapter_count = getattr(story, "chapter_count", 0) or 0
        base = (
            stats.views * w["views"]
            + stats.bookmarks_count * w["bookmarks"]
            + stats.comments_count * w["comments"]
            + chapter_count * w["chapters"]
        )

    days = days_between(now, getattr(story, "updated_at", None))
    time_adjusted = base * get_decay_factor(days)

    engagement_weight, rating_weight = RATED_BLEND if has_ratings else UNRATED_BLEND
    final = time_adjusted * engagement_weight + bayesian * RATING_SCALE * rating_weight

    return max(MIN_SCORE, final)
