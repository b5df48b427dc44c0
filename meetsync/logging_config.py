"""Logging configuration for MeetSync."""

import logging
import sys


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the `meetsync` logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("meetsync")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Calling twice (tests, reloads) must not duplicate output
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(handler)

    return logger
