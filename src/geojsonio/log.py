"""
Logging configuration for the geojsonio command line.

Library modules only create loggers under the ``geojsonio`` namespace; handlers
are attached here, by the CLI, and never on import.
"""

import logging
import sys

LOGGER_NAME = "geojsonio"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Attach a console handler to the ``geojsonio`` logger.

    Args:
        verbose: Log DEBUG messages with module names instead of INFO
            messages only.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    if verbose:
        console.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    else:
        console.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console)
    logger.propagate = False

    return logger
