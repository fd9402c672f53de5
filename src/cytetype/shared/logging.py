"""
Logging for the cytetype package.

Library modules only ask for named loggers. Handlers are attached by the
command line entry point (or by the host application), never on import.
"""

import logging
import sys
from typing import Optional, TextIO
from pathlib import Path

PACKAGE_LOGGER = "cytetype"

LOG_FORMAT = '[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s'
DATE_FORMAT = '%H:%M:%S'

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def configure_logging(
    verbose: bool = False,
    log_file: Optional[Path] = None,
    stream: Optional[TextIO] = None
) -> logging.Logger:
    """
    Send package log records to the console and optionally a file.

    Calling it again replaces the handlers from the previous call.

    Args:
        verbose: Log DEBUG records (per-poll status, retry decisions)
        log_file: Also append records to this file
        stream: Console stream (default: stdout)

    Returns:
        The package logger
    """
    level = logging.DEBUG if verbose else logging.INFO
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)

    for handler in list(package_logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            package_logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler(stream or sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, e.g. ``get_logger(__name__)``."""
    return logging.getLogger(name)
