"""Logging setup utilities for rshrelay.

Relayed remote output owns stdout. Every handler installed here writes
to stderr or a file, so the relay can be piped without log lines mixing
into the captured output.
"""

from __future__ import annotations

import logging
import sys

from rshrelay.config.settings import LoggingConfig

PACKAGE_LOGGER = "rshrelay"

# Marks handlers owned by setup_logging so a later call can replace them.
_OWNED = "_rshrelay_owned"


def setup_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Configure the ``rshrelay`` logger from ``config``.

    Calling it again (for example after ``-v`` raised the level) swaps
    out the handlers from the previous call instead of adding more.
    Handlers installed by anyone else are left alone.

    Returns:
        The configured package logger.
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(PACKAGE_LOGGER)

    for handler in [h for h in logger.handlers if getattr(h, _OWNED, False)]:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(logging.FileHandler(config.file))

    for handler in handlers:
        setattr(handler, _OWNED, True)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    logger.debug("Logging to stderr at %s level", config.level.upper())
    return logger
