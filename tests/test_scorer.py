"""Tests for the Bayesian story score."""

from datetime import timedelta
from types import SimpleNamespace

import pytest

from processor.ranking import calculate_bayesian_score, bayesian_rating, get_decay_factor, StatsWindow

from .conftest import NOW


def story(days_old: int = 0, chapter_count: int = 0):
    return SimpleNamespace(updated_at=NOW - timedelta(days=days_old), chapter_count=chapter_count)


def test_unrated_story_formula():
    """1000 views, 50 chapters, no ratings, fresh: 605 * 0.9 + 3.5 / 2 * 10 * 0.1."""
    score = calculate_bayesian_score(story(chapter_count=50), {"views": 1000}, now=NOW)
    assert score == pytest.approx(546.25)


def test_rated_story_formula():
    """Rated stories blend 0.7 engagement with 0.3 Bayesian rating."""
    stats = StatsWindow(views=100, ratings_count=4, ratings_sum=32, bookmarks_count=10, comments_count=5)
    score = calculate_bayesian_score(story(), stats, now=NOW)

    base = 100 * 0.4 + 8 * 10 * 0.3 + 10 * 0.2 + 5 * 0.1
    bayesian = (4 / 14) * 8 + (10 / 14) * 3.5
    assert score == pytest.approx(base * 0.7 + bayesian * 10 * 0.3)


def test_missing_stats_count_as_zero():
    assert calculate_bayesian_score(story(), None, now=NOW) == pytest.approx(1.75)
    assert calculate_bayesian_score(story(), {}, now=NOW) == pytest.approx(1.75)


def test_score_floor():
    """Nothing to score and a zero corpus average still yields 1."""
    score = calculate_bayesian_score(story(days_old=400), None, avg_rating_all_stories=0, now=NOW)
    assert score == 1


def test_more_ratings_at_high_average_score_higher():
    scores = [
        calculate_bayesian_score(story(), StatsWindow(ratings_count=c, ratings_sum=9 * c), now=NOW)
        for c in (1, 5, 20, 100)
    ]
    assert scores == sorted(scores)
    assert len(set(scores)) == len(scores)


def test_smoothing_rises_toward_high_average():
    """Average 9 above the 3.5 corpus mean: more ratings pull the rating up toward 9."""
    ratings = [bayesian_rating(c, 9.0, avg_rating_all_stories=3.5) for c in (1, 5, 20, 100, 1000)]

    assert all(a < b for a, b in zip(ratings, ratings[1:]))
    assert 3.5 < ratings[0] and ratings[-1] < 9.0


def test_smoothing_falls_toward_low_average():
    """Average 2 below the 3.5 corpus mean: more ratings pull the rating down toward 2."""
    ratings = [bayesian_rating(c, 2.0, avg_rating_all_stories=3.5) for c in (1, 5, 20, 100, 1000)]

    assert all(a > b for a, b in zip(ratings, ratings[1:]))
    assert ratings[0] < 3.5 and ratings[-1] > 2.0


def test_smoothing_at_corpus_average_stays_put():
    assert bayesian_rating(7, 3.5, avg_rating_all_stories=3.5) == pytest.approx(3.5)


def test_unrated_smoothing_is_half_corpus_average():
    assert bayesian_rating(0, 0.0, avg_rating_all_stories=3.5) == 1.75


def test_older_story_scores_lower():
    """Same inputs, 30 days staler: engagement decays by 0.97 ** 30."""
    fresh = calculate_bayesian_score(story(0, 50), {"views": 1000}, now=NOW)
    stale = calculate_bayesian_score(story(30, 50), {"views": 1000}, now=NOW)

    assert fresh > stale
    assert stale == pytest.approx(605 * 0.97 ** 30 * 0.9 + 1.75)
    assert (fresh - 1.75) / (stale - 1.75) == pytest.approx(1 / 0.97 ** 30)


def test_decay_uses_whole_days():
    """23 hours is still day 0."""
    almost_a_day = SimpleNamespace(updated_at=NOW - timedelta(hours=23), chapter_count=0)
    fresh = calculate_bayesian_score(story(), {"views": 100}, now=NOW)
    assert calculate_bayesian_score(almost_a_day, {"views": 100}, now=NOW) == fresh


def test_missing_or_future_updated_at_means_no_decay():
    fresh = calculate_bayesian_score(story(), {"views": 100}, now=NOW)
    no_date = SimpleNamespace(updated_at=None, chapter_count=0)
    future = SimpleNamespace(updated_at=NOW + timedelta(days=3), chapter_count=0)

    assert calculate_bayesian_score(no_date, {"views": 100}, now=NOW) == fresh
    assert calculate_bayesian_score(future, {"views": 100}, now=NOW) == fresh


def test_decay_factor():
    assert get_decay_factor(0) == 1.0
    assert get_decay_factor(1) == pytest.approx(0.97)
    assert get_decay_factor(-5) == 1.0
