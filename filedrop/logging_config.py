"""
Logging for the filedrop storage core.

Backends and the cleanup sweep share one "filedrop" logger. Stored and
deleted files are logged at INFO, rejected uploads at INFO, unreadable
metadata at WARNING and failed writes at ERROR with the traceback.
"""
import logging
import sys

from filedrop.config import settings


def setup_logging() -> logging.Logger:
    """
    Return the filedrop logger, attaching a stdout handler on first use.

    Every module calls this at import time, so the handler is only added
    once. Lines look like "<time> - filedrop - INFO - Stored file key=...".
    The level comes from the LOG_LEVEL setting.

    Returns:
        logging.Logger: The "filedrop" logger
    """
    logger = logging.getLogger("filedrop")
    logger.setLevel(settings.LOG_LEVEL)

    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(settings.LOG_LEVEL)

        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger
