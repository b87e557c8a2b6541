"""Logging setup for the ``wren`` command.

Library modules only create loggers under the ``wren`` namespace; this
helper is what attaches a handler when wren runs as a program.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "info") -> logging.Logger:
    """Attach a stderr handler to the ``wren`` logger at *level*.

    Calling it twice replaces the handler rather than stacking a second one.
    """
    logger = logging.getLogger("wren")
    for handler in list(logger.handlers):
        if getattr(handler, "_wren_cli", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._wren_cli = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    return logger
