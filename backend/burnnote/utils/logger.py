# burnnote/utils/logger.py

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logger(level: str = "INFO") -> logging.Logger:
    """
    Configure the package logger once. Calling it again only adjusts the level.
    """
    logger = logging.getLogger("burnnote")
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
