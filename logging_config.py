"""Application logger: console output plus a rotating log file."""
import logging
from logging.handlers import RotatingFileHandler

import config

LOGGER_NAME = "indian_legacy"

formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")


def setup_logging(level: str = config.LOG_LEVEL, log_file: str = config.LOG_FILE):
    """Attach console and file handlers to the application logger once"""
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger
    logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # An empty LOG_FILE disables the file handler.
    if log_file:
        file_handler = RotatingFileHandler(log_file, maxBytes=2000000, backupCount=3, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str | None = None):
    """Return the application logger or one of its children"""
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)
