"""Logging configuration for diceware_db."""

from __future__ import annotations

import logging


_FORMAT = "%(asctime)s %(levelname)-8s %(name)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: str | None = None,
) -> logging.Logger:
    """Configure and return the diceware_db logger.

    verbose: DEBUG level, including store and retry details
    quiet: WARNING level
    log_file: write log records to this path
    """
    logger = logging.getLogger("diceware_db")

    # Repeated calls (one per CLI invocation in tests) must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if verbose:
        logger.setLevel(logging.DEBUG)
    elif quiet:
        logger.setLevel(logging.WARNING)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
        logger.addHandler(file_handler)
    else:
        # Records stay out of stderr; the CLI reports errors itself
        logger.addHandler(logging.NullHandler())

    return logger
