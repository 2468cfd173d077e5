"""Logging configuration for processes that run gitremote code."""

import copy
import logging
import sys
from typing import Optional, TextIO

from .config import Config

PACKAGE_LOGGER = 'gitremote'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class StructuredFormatter(logging.Formatter):
    """
    Formatter that prefixes the message with the record's ``operation`` extra.

    The prefix is applied to a copy, so a record shared by several handlers
    keeps its original message.
    """

    def format(self, record):
        operation = getattr(record, 'operation', None)
        if operation is None:
            return super().format(record)
        prefixed = copy.copy(record)
        prefixed.msg = f"[{operation}] {record.getMessage()}"
        prefixed.args = None
        return super().format(prefixed)


def setup_logging(config: Config, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Send gitremote diagnostics to ``stream`` (stderr by default).

    Every module logs under the ``gitremote`` logger, so one handler there
    covers the whole package. Calling this again only updates the level.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, config.log_level))

    if not logger.handlers:
        handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.setFormatter(StructuredFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
