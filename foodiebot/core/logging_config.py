# foodiebot/core/logging_config.py
"""
Logging setup for FoodieBot.

Call setup_logging() once at startup. LOG_LEVEL picks the level
(DEBUG, INFO, WARNING, ERROR, CRITICAL), defaulting to INFO.
"""
import logging
import sys

from foodiebot.core.config import settings

VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def setup_logging(level: str = None) -> None:
    level = (level or settings.LOG_LEVEL or "INFO").upper()
    if level not in VALID_LEVELS:
        level = "INFO"

    numeric_level = getattr(logging, level)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    logging.getLogger("foodiebot").setLevel(numeric_level)

    # Third-party chatter
    if level != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        logging.getLogger("urllib3").setLevel(logging.WARNING)
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging configured at %s level", level)
