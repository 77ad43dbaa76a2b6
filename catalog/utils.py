import sys

from loguru import logger

from catalog.settings import global_settings


def setup_logging(level: str | None = None) -> None:
    """
    Route loguru output to stderr at the configured level.

    Replaces loguru's default handler, so calling it twice is harmless.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or global_settings.log_level).upper(),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
        "<cyan>{name}</cyan> - <level>{message}</level>",
    )
