# Author: Emrullah Erce Dutkan
"""
Console logging for scripts and notebooks using the PPCA engine.

The library itself only attaches a NullHandler; call init_logging() to see
convergence messages (INFO) or per-iteration log-likelihoods (DEBUG).
"""

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PACKAGE_LOGGER = "ppca_engine"


def init_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Attach a console handler to the package logger.

    Calling it more than once only updates the level.

    Args:
        level: Logging level for the package logger.

    Returns:
        The package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    has_stream = any(
        type(h) is logging.StreamHandler for h in logger.handlers
    )
    if not has_stream:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(handler)
    return logger
