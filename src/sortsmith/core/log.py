# log.py
# SPDX-License-Identifier: MIT
"""Package logger setup for sortsmith.

Sorting is a library concern, so nothing is printed unless the host
application configures logging. A NullHandler sits on the package logger;
:func:`configure_logging` attaches a stream handler for CLI runs and
:func:`temp_level` scopes a level change to a ``with`` block (handy when
debugging why a pipeline fell back to string coercion).
"""

from __future__ import annotations

import logging
import reprlib
import sys
from contextlib import contextmanager
from typing import IO, Any, Iterator

__all__ = [
    "PACKAGE_LOGGER_NAME",
    "DEFAULT_LOG_FORMAT",
    "get_logger",
    "configure_logging",
    "temp_level",
    "short_repr",
]

PACKAGE_LOGGER_NAME = "sortsmith"
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logging.getLogger(PACKAGE_LOGGER_NAME).addHandler(logging.NullHandler())

_repr = reprlib.Repr()
_repr.maxstring = 60
_repr.maxother = 60
_repr.maxdict = 6
_repr.maxlist = 6


def short_repr(value: Any) -> str:
    """Return a bounded ``repr`` suitable for log lines and error messages."""
    return _repr.repr(value)


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.strip().upper(), logging.INFO)
    return int(level)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the ``sortsmith`` namespace.

    Args:
        name (str | None): Fully qualified logger name, usually
            ``__name__``. Defaults to the package logger.

    Returns:
        logging.Logger: Logger instance for the requested name.
    """
    return logging.getLogger(name or PACKAGE_LOGGER_NAME)


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: IO[str] | None = None,
    fmt: str | None = None,
    datefmt: str | None = None,
    propagate: bool | None = None,
    logger_name: str = PACKAGE_LOGGER_NAME,
) -> logging.Logger:
    """Attach a single stream handler to a sortsmith logger.

    Calling this repeatedly is safe: an existing StreamHandler is reused and
    only its stream is refreshed when the previous one has been closed
    (pytest's capture does this between tests).

    Args:
        level (int | str): Level or level name; unknown names map to INFO.
        stream (IO[str] | None): Target stream, ``sys.stderr`` by default.
        fmt (str | None): Format string; :data:`DEFAULT_LOG_FORMAT` when
            omitted.
        datefmt (str | None): Date format for the handler.
        propagate (bool | None): Whether records reach ancestor loggers.
            ``None`` keeps propagation on so root handlers (e.g. caplog)
            still see records.
        logger_name (str): Logger to configure.

    Returns:
        logging.Logger: The configured logger.
    """
    logger = get_logger(logger_name or PACKAGE_LOGGER_NAME)
    logger.setLevel(_resolve_level(level))
    logger.propagate = True if propagate is None else bool(propagate)

    target = stream if stream is not None else sys.stderr
    stream_handlers = [
        h for h in logger.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]
    if not stream_handlers:
        handler = logging.StreamHandler(target)
        handler.setFormatter(logging.Formatter(fmt=fmt or DEFAULT_LOG_FORMAT, datefmt=datefmt))
        logger.addHandler(handler)
        return logger

    for handler in stream_handlers:
        if getattr(handler.stream, "closed", False):
            # setStream() would flush the closed stream and raise
            handler.stream = target
        elif stream is not None:
            handler.setStream(target)
        if fmt is not None or datefmt is not None:
            handler.setFormatter(logging.Formatter(fmt=fmt or DEFAULT_LOG_FORMAT, datefmt=datefmt))
    return logger


@contextmanager
def temp_level(level: int | str, name: str | None = None) -> Iterator[logging.Logger]:
    """Set a logger level for the duration of a ``with`` block.

    Args:
        level (int | str): Level or level name to apply.
        name (str | None): Logger name; the package logger by default.

    Yields:
        logging.Logger: Logger with the temporary level applied.
    """
    logger = get_logger(name or PACKAGE_LOGGER_NAME)
    previous = logger.level
    logger.setLevel(_resolve_level(level))
    try:
        yield logger
    finally:
        logger.setLevel(previous)
