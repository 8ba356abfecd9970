import sys

from loguru import logger

from convohub.core.config import Settings


def setup_logging(settings: Settings) -> None:
    """Replace loguru's default sink with one configured from settings."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL.upper(),
        serialize=settings.JSON_LOGS,
        backtrace=False,
        diagnose=False,
    )
