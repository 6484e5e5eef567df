import logging
import os
import sys

from typing import Optional, TextIO

import psutil

LOG_FORMAT = "[%(asctime)s - %(levelname)s - %(memory_usage).2f MB] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# marks handlers installed by configure_memory_logger so they can be removed without touching others
_MANAGED_ATTR = "_bedrecord_memory_handler"


def _get_memory_usage() -> float:
    """Get current memory usage in MB"""
    process = psutil.Process(os.getpid())
    return process.memory_info().rss / 1024 / 1024


class MemoryUsageFilter(logging.Filter):
    """Attach the current resident memory (MB) to each log record as `memory_usage`."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "memory_usage"):
            record.memory_usage = _get_memory_usage()
        return True


def _has_memory_filter(obj) -> bool:
    return any(isinstance(f, MemoryUsageFilter) for f in obj.filters)


def remove_managed_memory_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, _MANAGED_ATTR, False):
            logger.removeHandler(handler)
            handler.close()


def configure_memory_logger(
    logger: logging.Logger,
    stream: Optional[TextIO] = None,
    log_file: Optional[str] = None,
    level: int = logging.INFO,
    replace_managed_handlers: bool = False,
) -> list[logging.Handler]:
    """Install handlers on `logger` whose output includes memory usage.

    **Arguments:**

    - `logger`: Logger to configure.
    - `stream`: Stream for console output. Defaults to `sys.stderr`, unless only `log_file` is given.
    - `log_file`: Optional path of a log file to append to.
    - `level`: Logger level.
    - `replace_managed_handlers`: Remove handlers from a previous call first.

    **Returns:**

    - The handlers that were added.
    """
    if replace_managed_handlers:
        remove_managed_memory_handlers(logger)

    logger.setLevel(level)
    if not _has_memory_filter(logger):
        logger.addFilter(MemoryUsageFilter())

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = []
    if stream is not None or not log_file:
        handlers.append(logging.StreamHandler(stream if stream is not None else sys.stderr))
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        # records propagated from child loggers skip the logger-level filter
        handler.addFilter(MemoryUsageFilter())
        setattr(handler, _MANAGED_ATTR, True)
        logger.addHandler(handler)

    return handlers


class MemoryLogger:
    """Thin wrapper around a `logging.Logger` that reports memory usage with each message.

    If the logger has no handlers yet, console (and optionally file) handlers are installed.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        log_file: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if logger is None:
            logger = logging.getLogger(name)
        self.logger = logger

        if not self.logger.handlers and not self._has_ancestor_handlers():
            configure_memory_logger(self.logger, log_file=log_file)

    def _has_ancestor_handlers(self) -> bool:
        parent = self.logger.parent
        current = self.logger
        while parent is not None and current.propagate:
            if parent.handlers and parent is not logging.getLogger():
                return True
            current = parent
            parent = parent.parent
        return False

    def _log(self, level: int, message: str) -> None:
        self.logger.log(level, message, extra={"memory_usage": _get_memory_usage()})

    def debug(self, message: str) -> None:
        self._log(logging.DEBUG, message)

    def info(self, message: str) -> None:
        """Log info message with memory usage"""
        self._log(logging.INFO, message)

    def warning(self, message: str) -> None:
        self._log(logging.WARNING, message)

    def error(self, message: str) -> None:
        self._log(logging.ERROR, message)
