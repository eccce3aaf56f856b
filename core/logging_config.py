# core/logging_config.py
import logging

from core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOGGER_NAME = "homestead"

# supabase-py talks to GoTrue through httpx, which logs every request URL at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "hpack")


def setup_logger(level: str = None) -> logging.Logger:
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)

    # Avoid duplicate handlers in dev reload
    if logger.handlers:
        return logger

    logger.setLevel((level or settings.LOG_LEVEL).upper())

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    return logger


logger = setup_logger()
