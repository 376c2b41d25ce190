"""Logging setup for the controller: the thermo_reader namespace logger writes
to stdout and, when asked, to a rotating file."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from .logging_utils import LOGGER_NAMESPACE

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
LOG_MAX_BYTES = 256 * 1024  # SD cards on the Pi are small
LOG_BACKUP_COUNT = 3

LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

_OWNED = "_thermo_reader_owned"


def _owned(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    setattr(handler, _OWNED, True)
    return handler


def configure_logging(level: str = "info", *, log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """Install the controller's handlers, replacing any from an earlier call.

    Raises ValueError for a level name outside ``LOG_LEVELS``.
    """

    try:
        numeric_level = LOG_LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f"Unknown log level '{level}'") from None

    logger = logging.getLogger(LOGGER_NAMESPACE)
    for handler in [h for h in logger.handlers if getattr(h, _OWNED, False)]:
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_owned(logging.StreamHandler(sys.stdout), numeric_level))

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(
            log_path,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        logger.addHandler(_owned(rotating, numeric_level))

    logger.setLevel(numeric_level)

    # aiohttp logs every request at INFO; the property API is polled often.
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
    return logger


__all__ = ["LOG_DATEFMT", "LOG_FORMAT", "LOG_LEVELS", "configure_logging"]
