"""
utils/logging_config.py
=======================
Console logging for the app. Library modules only create module loggers;
handlers are installed once, here.
"""
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Configure the root logger with a single console handler."""
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

    # Werkzeug logs every request at INFO
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    return logger
