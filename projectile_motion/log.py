"""
Logging Setup
=============
One stream handler per named logger, with a timestamped format. The level
comes from the PROJECTILE_MOTION_LOG_LEVEL environment variable (default
INFO); an unknown level name falls back to INFO with a warning.
"""

import logging
import os
from typing import Optional


LOG_LEVEL_ENV = "PROJECTILE_MOTION_LOG_LEVEL"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(name or "projectile_motion")
    if not logger.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter(
            "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        handler.setFormatter(fmt)
        logger.addHandler(handler)

        level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
        level = logging.getLevelName(level_name)
        if isinstance(level, int):
            logger.setLevel(level)
        else:
            logger.setLevel(logging.INFO)
            logger.warning("Unknown log level %r in %s, using INFO",
                           level_name, LOG_LEVEL_ENV)
    return logger
