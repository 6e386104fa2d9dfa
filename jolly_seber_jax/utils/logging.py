"""
Logging for jolly-seber-jax.

Loggers are created lazily and configured from the ``logging`` section of
the active configuration the first time they emit. Keyword arguments passed
to a logging call are appended to the message as ``key=value`` pairs.
"""

import logging
import sys
import time
from functools import wraps
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config.settings import JollySeberConfig, LoggingConfig, LogLevel, get_default_config


_RESET = "\033[0m"


class ColoredFormatter(logging.Formatter):
    """Console formatter that wraps the level name in an ANSI color."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname)
        if color is None:
            return super().format(record)

        plain = record.levelname
        record.levelname = f"{color}{plain}{_RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def format_context(message: str, context: Dict[str, Any]) -> str:
    """Append key=value pairs to a message, separated by ' | '."""
    if not context:
        return message
    return " | ".join([message] + [f"{key}={value}" for key, value in context.items()])


def _build_handlers(settings: LoggingConfig) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []

    if settings.console_logging:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(ColoredFormatter(settings.format_string))
        handlers.append(console)

    if settings.file_logging and settings.log_file:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        log_file = logging.FileHandler(settings.log_file)
        log_file.setFormatter(logging.Formatter(settings.format_string))
        handlers.append(log_file)

    return handlers


class JollySeberLogger:
    """
    Wrapper around logging.Logger that accepts keyword context.

    The wrapped logger does not propagate to the root logger, so the handlers
    built from the logging settings are the only ones that emit. A logger is
    stale until its first message and again after setup_logging().
    """

    def __init__(self, name: str, config: Optional[JollySeberConfig] = None):
        self.name = name
        self.logger = logging.getLogger(name)
        self._config = config
        self.stale = True

    @property
    def config(self) -> JollySeberConfig:
        return self._config or get_default_config()

    def reconfigure(self) -> None:
        """Rebuild level and handlers from the logging settings."""
        settings = self.config.logging
        for handler in self.logger.handlers:
            handler.close()
        self.logger.handlers = _build_handlers(settings)
        self.logger.setLevel(LogLevel(settings.level).value)
        self.logger.propagate = False
        self.stale = False

    def log(self, level: int, message: str, exc_info: bool = False, **context) -> None:
        if self.stale:
            self.reconfigure()
        self.logger.log(level, format_context(message, context), exc_info=exc_info)

    def debug(self, message: str, **context) -> None:
        self.log(logging.DEBUG, message, **context)

    def info(self, message: str, **context) -> None:
        self.log(logging.INFO, message, **context)

    def warning(self, message: str, **context) -> None:
        self.log(logging.WARNING, message, **context)

    def error(self, message: str, **context) -> None:
        self.log(logging.ERROR, message, **context)

    def exception(self, message: str, **context) -> None:
        """Log at error level together with the active traceback."""
        self.log(logging.ERROR, message, exc_info=True, **context)


_registry: Dict[str, JollySeberLogger] = {}


def get_logger(name: str = "jolly_seber_jax") -> JollySeberLogger:
    """Return the shared logger for name, creating it on first use."""
    logger = _registry.get(name)
    if logger is None:
        logger = _registry[name] = JollySeberLogger(name)
    return logger


def setup_logging(
    level: Optional[Union[str, LogLevel]] = None,
    console: Optional[bool] = None,
    file_path: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None,
) -> None:
    """
    Change the global logging settings.

    Only the arguments that are given are changed. Giving file_path turns
    file logging on. Every registered logger picks up the new settings with
    its next message.
    """
    settings = get_default_config().logging
    updates = {
        "level": LogLevel(level) if level is not None else None,
        "console_logging": console,
        "log_file": Path(file_path) if file_path is not None else None,
        "format_string": format_string,
    }
    for key, value in updates.items():
        if value is not None:
            setattr(settings, key, value)
    if file_path is not None:
        settings.file_logging = True

    for logger in _registry.values():
        logger.stale = True


def log_performance(func):
    """Log the wall-clock duration of every call at debug level."""
    logger = get_logger(func.__module__)

    @wraps(func)
    def timed(*args, **kwargs):
        start = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception:
            logger.error(f"{func.__name__} failed", seconds=f"{time.perf_counter() - start:.3f}")
            raise
        logger.debug(f"{func.__name__} finished", seconds=f"{time.perf_counter() - start:.3f}")
        return result

    return timed
