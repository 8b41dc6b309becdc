"""
Package-wide logger for Treelet.
"""

import logging
import sys


LOGGER_NAME = "Treelet"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _build_logger() -> logging.Logger:
    _logger = logging.getLogger(LOGGER_NAME)

    # Importing the module twice must not stack handlers
    if not _logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        _logger.addHandler(handler)

    _logger.setLevel(logging.INFO)
    _logger.propagate = False
    return _logger


logger = _build_logger()


__all__ = ["logger", "LOGGER_NAME"]
