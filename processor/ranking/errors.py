"""
Ranking and stats exceptions.

The API layer maps these to HTTP status codes; each class carries the
code it should surface as.
"""


class RankingError(Exception):
    """Base class for ranking failures."""
    status_code = 500


class InvalidHorizonError(RankingError):
    """Requested horizon is not one of daily / weekly / monthly / all-time."""
    status_code = 404

    def __init__(self, horizon: str):
        self.horizon = horizon
        super().__init__(f"Unknown ranking horizon: {horizon}")


class RankingLockError(RankingError):
    """Another run holds the horizon's lock and did not release it in time."""
    status_code = 409

    def __init__(self, horizon: str, waited: float):
        self.horizon = horizon
        self.waited = waited
        super().__init__(f"Ranking lock for '{horizon}' still held after {waited:.1f}s")


class RankingUnavailableError(RankingError):
    """Rankings are missing and could not be rebuilt."""
    status_code = 503


class StatsError(Exception):
    """Base class for stats ingestion failures."""
    status_code = 500


class StoryNotFoundError(StatsError):
    status_code = 404

    def __init__(self, story_id: str):
        self.story_id = story_id
        super().__init__(f"Story not found: {story_id}")


class InvalidRatingError(StatsError):
    status_code = 400
