"""
Logging setup for the Story Ranking Backend.

Everything logs through loguru. uvicorn, APScheduler, Alembic and
SQLAlchemy use the standard `logging` module, so their records are routed
into the same sinks; a missed cron tick or a failed migration then shows
up in the api/scheduler log files next to the ranking job output.

Usage:
    from utils.logger import logger

    logger.info("Updated daily rankings")
"""
import logging
import sys
from pathlib import Path

from loguru import logger

logger.remove()

_configured = False

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"

# Standard-library loggers forwarded to loguru
ROUTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "apscheduler", "alembic", "sqlalchemy.engine")


class InterceptHandler(logging.Handler):
    """Forward standard `logging` records to loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def route_std_logging(level: str = "INFO") -> None:
    """Send third-party `logging` output through loguru."""
    handler = InterceptHandler()
    logging.basicConfig(handlers=[handler], level=0, force=True)
    for name in ROUTED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [handler]
        std_logger.propagate = False
    # SQL echo is opt-in through DATABASE_ECHO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(level)


def setup_logging(log_dir: Path = None, log_level: str = "INFO", app_name: str = "app"):
    """
    Configure console and file sinks once per process.

    Args:
        log_dir: Directory for log files. None disables file logging.
        log_level: Minimum console level
        app_name: Log file prefix ("api" or "scheduler")
    """
    global _configured

    if _configured:
        return

    logger.add(sys.stderr, level=log_level, format=CONSOLE_FORMAT)

    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        # Rotates at midnight, same cadence as the ranking jobs
        logger.add(
            log_dir / f"{app_name}_{{time:YYYY-MM-DD}}.log",
            level="INFO",
            format=FILE_FORMAT,
            rotation="00:00",
            retention="30 days",
            compression="gz",
            encoding="utf-8",
        )

    route_std_logging(log_level)
    _configured = True

    if log_dir:
        logger.info(f"Logging configured for {app_name}. Log directory: {log_dir}")


def init_logging(app_name: str = "app"):
    """
    Configure logging from settings. Call once at process startup.

    Args:
        app_name: Log file prefix ("api" or "scheduler")
    """
    from config import settings, ensure_directories

    ensure_directories()
    setup_logging(log_dir=settings.LOG_DIR, log_level=settings.LOG_LEVEL, app_name=app_name)


__all__ = ["logger", "setup_logging", "init_logging", "InterceptHandler"]
