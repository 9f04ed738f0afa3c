"""Handlers for the ``rpi_camstream`` logger namespace.

Nothing is configured on import. Programs that want the package's records on
the console or in a file call ``configure_logging``; only the package logger
is touched, so an application's own root logging setup keeps working.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Union

from .logging_utils import LOGGER_NAMESPACE

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
DEFAULT_MAX_BYTES = 1024 * 1024
DEFAULT_BACKUP_COUNT = 3

# Marks handlers installed here so reconfiguring never removes foreign ones
_OWNED_ATTR = "_rpi_camstream_owned"


def coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level '{level}'")
    return value


def _owned_handlers(logger: logging.Logger) -> List[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, _OWNED_ATTR, False)]


def remove_handlers() -> None:
    """Detach and close every handler ``configure_logging`` installed."""
    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    for handler in _owned_handlers(package_logger):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = True


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    console: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    propagate: bool = False,
) -> logging.Logger:
    """Route ``rpi_camstream`` records to stderr and/or a rotating file.

    Calling it again replaces the handlers from the previous call. Console
    output goes to stderr because capture pipelines often write image data to
    stdout. When handlers are installed, records stop propagating to the root
    logger unless ``propagate`` is set, so they are not printed twice.

    Returns the package logger.
    """
    remove_handlers()

    numeric_level = coerce_level(level)
    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    handlers: List[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        ))

    for handler in handlers:
        setattr(handler, _OWNED_ATTR, True)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    package_logger.setLevel(numeric_level)
    package_logger.propagate = propagate or not handlers
    return package_logger


__all__ = [
    "LOG_DATEFMT",
    "LOG_FORMAT",
    "coerce_level",
    "configure_logging",
    "remove_handlers",
]
