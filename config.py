"""
Story Ranking Backend - Configuration
"""
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Paths
    BASE_DIR: Path = Path(__file__).parent
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).parent / "data")
    DATABASE_PATH: Path = Field(default_factory=lambda: Path(__file__).parent / "data" / "stories.db")
    LOG_DIR: Path = Field(default_factory=lambda: Path(__file__).parent / "data" / "logs")

    # Database
    DATABASE_BUSY_TIMEOUT_MS: int = Field(default=5000, description="SQLite wait on a locked database")
    DATABASE_ECHO: bool = Field(default=False)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    # Ranking
    RANKING_MIN_RATINGS: int = Field(default=10, description="Bayesian confidence constant")
    RANKING_DEFAULT_AVG_RATING: float = Field(default=3.5, description="Corpus average when nothing is rated")
    RANKING_HOT_TOP_N: int = Field(default=10, description="Ranks at or above this get the hot flag")
    RANKING_GUARD_CACHE_SECONDS: int = Field(default=300)
    RANKING_LOCK_TTL_SECONDS: int = Field(default=600)
    RANKING_LOCK_WAIT_SECONDS: float = Field(default=30.0)
    RANKING_HOT_FLAG_QUEUE_SIZE: int = Field(default=16)
    RANKING_INIT_ON_STARTUP: bool = Field(default=True)

    # Scheduler
    SCHEDULER_TIMEZONE: str = Field(default="Asia/Ho_Chi_Minh")

    # API
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)
    ADMIN_API_KEY: str = Field(default="", description="Required in X-Admin-Key for update endpoints")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def ensure_directories():
    """Ensure all required directories exist."""
    dirs = [
        settings.DATA_DIR,
        settings.LOG_DIR,
        settings.DATABASE_PATH.parent,
    ]
    for dir_path in dirs:
        dir_path.mkdir(parents=True, exist_ok=True)
