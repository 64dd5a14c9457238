"""Logging configuration for the command-line entry point.

Library modules only create module-level loggers; handlers are attached
here, once, by the application.
"""

import logging
import sys

LOGGER_NAME = "chord_recognizer"


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a console handler to the package logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger
