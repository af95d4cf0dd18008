"""Centralized logging configuration."""

import logging

from classy_weather.config import DEBUG

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# httpx logs every provider request at INFO; one query makes up to three
THIRD_PARTY_LEVELS = {
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.INFO,
    "uvicorn.error": logging.INFO,
    "httpx": logging.WARNING,
    "fastapi": logging.INFO,
}


def configure_logging(debug: bool = DEBUG):
    """
    Send application and server logs to the console in a single format.

    With ``debug`` set, the application loggers also emit the orchestrator's
    stale-result and cancellation messages. Third-party loggers keep their
    own levels from ``THIRD_PARTY_LEVELS``.
    """
    level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    _replace_handlers(root_logger, formatter, level)

    for logger_name, logger_level in THIRD_PARTY_LEVELS.items():
        logger = logging.getLogger(logger_name)
        logger.setLevel(logger_level)
        _replace_handlers(logger, formatter, logger_level)
        # Don't propagate to avoid duplicate messages
        logger.propagate = False


def _replace_handlers(logger: logging.Logger, formatter: logging.Formatter, level: int):
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
