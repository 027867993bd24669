"""Structured JSON logging configuration."""

import logging
import sys
from typing import IO, Optional

from pythonjsonlogger import jsonlogger


def setup_logger(
    name: str = "jolokia_monitor",
    level: str = "INFO",
    stream: Optional[IO[str]] = None
) -> logging.Logger:
    """
    Configure structured JSON logging.

    Records carry ``time``, ``logger``, ``level`` and ``message`` plus any
    ``extra`` passed by the caller (tags, fields, error details).

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Output stream, stdout by default

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(message)s',
        rename_fields={"asctime": "time", "name": "logger", "levelname": "level"},
    ))
    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    return logger
