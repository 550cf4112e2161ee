#!/usr/bin/env python3
"""Structured logging for tidydir.

This module wraps the standard logging module with:
- Log levels mirroring Python's logging module
- Structured key=value context on every message
- Thread-local context stacks (naming scripts may run on a thread pool)
- Console output on stderr so stdout stays clean for list mode
- Optional rotating log file

Example:
    >>> logger = Logger(level=LogLevel.INFO)
    >>> logger.info("Scanning directory", path="/home/me/Downloads")
    >>> with logger.add_context(rule="Downloads"):
    ...     logger.debug("Matched entry", name="song.mp3")
"""

import logging
import logging.handlers
import sys
import threading
from contextlib import contextmanager
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from tidydir.core.constants import Limits


class LogLevel(IntEnum):
    """Log levels matching Python's logging module."""

    DEBUG = logging.DEBUG  # 10
    INFO = logging.INFO  # 20
    WARNING = logging.WARNING  # 30
    ERROR = logging.ERROR  # 40
    CRITICAL = logging.CRITICAL  # 50


class Logger:
    """Structured logger with context support.

    Messages are formatted as ``message | key=value ...``. The raw context
    dict is also attached to each record as ``record.context`` for handlers
    that want it.
    """

    _context_stack = threading.local()

    def __init__(
        self,
        name: str = "tidydir",
        level: Union[LogLevel, str] = LogLevel.WARNING,
        handlers: Optional[List[logging.Handler]] = None,
    ):
        """Initialize logger.

        Args:
            name: Logger name for identification
            level: Minimum log level to output
            handlers: Optional list of logging handlers (default: stderr console)
        """
        self.name = name
        self.logger = logging.getLogger(name)
        self.set_level(level)

        if handlers is None:
            handlers = [self._create_console_handler()]

        self.logger.handlers.clear()
        for handler in handlers:
            self.logger.addHandler(handler)

        self.logger.propagate = False

    def _create_console_handler(self) -> logging.StreamHandler:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        return handler

    def create_file_handler(
        self,
        filename: Union[str, Path],
        max_bytes: int = Limits.LOG_FILE_MAX_BYTES,
        backup_count: int = Limits.LOG_FILE_BACKUPS,
    ) -> logging.handlers.RotatingFileHandler:
        """Create rotating file handler.

        Args:
            filename: Path to log file (parent directories are created)
            max_bytes: Maximum size before rotation
            backup_count: Number of backup files to keep

        Returns:
            Configured rotating file handler
        """
        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count
        )
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        return handler

    def add_handler(self, handler: logging.Handler) -> None:
        """Add a new output handler.

        Args:
            handler: Logging handler to add
        """
        self.logger.addHandler(handler)

    def remove_handler(self, handler: logging.Handler) -> None:
        """Remove an output handler.

        Args:
            handler: Logging handler to remove
        """
        self.logger.removeHandler(handler)

    def set_level(self, level: Union[LogLevel, str]) -> None:
        """Set the minimum log level.

        Args:
            level: New log level (LogLevel or name)
        """
        if isinstance(level, str):
            level = LogLevel[level.upper()]
        self.logger.setLevel(level)

    def get_level(self) -> LogLevel:
        """Get current log level.

        Returns:
            Current log level
        """
        return LogLevel(self.logger.level)

    def _get_context(self) -> Dict[str, Any]:
        """Merge the thread-local context stack, innermost last."""
        if not hasattr(self._context_stack, "stack"):
            self._context_stack.stack = [{}]

        context: Dict[str, Any] = {}
        for ctx in self._context_stack.stack:
            context.update(ctx)
        return context

    def _format_message(self, msg: str, context: Dict[str, Any]) -> str:
        """Append context as ``key=value`` pairs after a ``|`` separator."""
        if context:
            ctx_str = " ".join(f"{k}={v}" for k, v in context.items())
            return f"{msg} | {ctx_str}"
        return msg

    @contextmanager
    def add_context(self, **kwargs):
        """Context manager to add temporary context.

        Args:
            **kwargs: Key-value pairs to add to context

        Example:
            >>> with logger.add_context(rule="Music"):
            ...     logger.info("Resolving moves")
        """
        if not hasattr(self._context_stack, "stack"):
            self._context_stack.stack = [{}]

        self._context_stack.stack.append(kwargs)
        try:
            yield
        finally:
            self._context_stack.stack.pop()

    def _log(self, level: LogLevel, msg: str, context: Dict[str, Any], **kwargs) -> None:
        if not self.logger.isEnabledFor(level):
            return
        combined = self._get_context()
        combined.update(context)
        self.logger.log(level, self._format_message(msg, combined), extra={"context": combined}, **kwargs)

    def debug(self, msg: str, **context) -> None:
        """Log debug message.

        Args:
            msg: Log message
            **context: Additional context key-value pairs
        """
        self._log(LogLevel.DEBUG, msg, context)

    def info(self, msg: str, **context) -> None:
        """Log info message.

        Args:
            msg: Log message
            **context: Additional context key-value pairs
        """
        self._log(LogLevel.INFO, msg, context)

    def warning(self, msg: str, **context) -> None:
        """Log warning message.

        Args:
            msg: Log message
            **context: Additional context key-value pairs
        """
        self._log(LogLevel.WARNING, msg, context)

    def error(self, msg: str, **context) -> None:
        """Log error message.

        Args:
            msg: Log message
            **context: Additional context key-value pairs
        """
        self._log(LogLevel.ERROR, msg, context)

    def exception(self, msg: str, exc: Exception, **context) -> None:
        """Log exception with traceback.

        Args:
            msg: Log message
            exc: Exception to log
            **context: Additional context key-value pairs
        """
        context["exception_type"] = type(exc).__name__
        context["exception_message"] = str(exc)
        self._log(LogLevel.ERROR, msg, context, exc_info=exc)

    def is_enabled_for(self, level: Union[LogLevel, str]) -> bool:
        """Check if logger is enabled for given level.

        Args:
            level: Log level to check

        Returns:
            True if logger would output at this level
        """
        if isinstance(level, str):
            level = LogLevel[level.upper()]
        return self.logger.isEnabledFor(level)


# Global logger instance
_global_logger: Optional[Logger] = None


def get_logger(name: str = "tidydir") -> Logger:
    """Get or create the shared logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    global _global_logger
    if _global_logger is None or _global_logger.name != name:
        _global_logger = Logger(name=name)
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Set the shared logger instance.

    Args:
        logger: Logger to use globally
    """
    global _global_logger
    _global_logger = logger
