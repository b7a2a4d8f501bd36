from __future__ import annotations

import logging
import os

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(level: str | int | None = None) -> int:
    """
    Configure crawler logging. Falls back to CRAWLER_LOG_LEVEL, then INFO.
    Returns the effective level.
    """
    if level is None:
        level = os.getenv("CRAWLER_LOG_LEVEL", "INFO")

    if isinstance(level, str):
        level = _LEVELS.get(level.upper(), logging.INFO)

    logging.basicConfig(level=level, format=LOG_FORMAT)
    # aiohttp's own access/client chatter only matters when debugging.
    if level > logging.DEBUG:
        logging.getLogger("aiohttp").setLevel(logging.WARNING)
    return level
