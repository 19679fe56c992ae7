"""
Logging configuration for codearch.

Everything logs under the ``codearch`` logger tree; the host decides where it goes.
"""

import logging
import sys

LOGGER_NAME = "codearch"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> logging.Handler:
    """Attach a stderr handler to the codearch logger and set its level.

    Safe to call repeatedly: the handler is only added once.

    Returns the stderr handler so it can be removed by the caller.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for h in logger.handlers:
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr:
            h.setLevel(level)
            return h

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
    logger.addHandler(handler)
    return handler
