#!/usr/bin/env python3

"""
Centralized logging configuration for the harness.

Sets up application-wide logging using Python's standard `logging` module:
- Configurable log level via argument or the logging config section.
- Console (stderr) and rotating file handlers on the root logger, so every
  module's ``logging.getLogger(__name__)`` logger is captured.
- Custom formatter that aligns multi-line messages under the prefix.
- Filters that drop Selenium remote-connection chatter and other noisy
  third-party loggers from the console.
- Calling ``setup_logging`` again only updates handler levels.
"""

import copy
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from testing.test_framework import Colors

LOG_FORMAT: str = "%(asctime)s %(levelname).3s [%(module)-8.8s %(funcName)-8.8s %(lineno)-4d] %(message)s"
DATE_FORMAT: str = "%H:%M:%S"

NOISY_LOGGERS: tuple[str, ...] = (
    "selenium",
    "urllib3",
    "websockets",
    "undetected_chromedriver",
    "WDM",
    "asyncio",
)


class NameFilter(logging.Filter):
    """Filters log records based on logger name starting with excluded prefixes."""

    def __init__(self, excluded_names: list[str]) -> None:
        super().__init__()
        self.excluded_names = excluded_names

    def filter(self, record: logging.LogRecord) -> bool:
        return not any(record.name.startswith(name) for name in self.excluded_names)


class RemoteConnectionFilter(logging.Filter):
    """Filters out DEBUG level messages originating from selenium's remote_connection.py."""

    def filter(self, record: logging.LogRecord) -> bool:
        is_debug = record.levelno == logging.DEBUG
        is_remote_conn = bool(record.pathname) and Path(record.pathname).name == "remote_connection.py"
        return not (is_debug and is_remote_conn)


class AlignedMessageFormatter(logging.Formatter):
    """
    Formats log records to align multi-line messages below the initial log prefix.
    Leading whitespace from subsequent lines of the original message is removed.
    """

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None, use_color: bool = False) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def _apply_level_color(self, message: str, level: int) -> str:
        if not self.use_color or "\033[" in message:
            return message
        if level >= logging.ERROR:
            return Colors.red(message)
        if level >= logging.WARNING:
            return Colors.yellow(message)
        return message

    def _prefix(self, record: logging.LogRecord) -> str:
        """Render the record's prefix by formatting it with a placeholder message."""
        record_copy = copy.copy(record)
        placeholder = "\x00"
        record_copy.msg = placeholder
        record_copy.args = ()
        record_copy.exc_info = None
        record_copy.exc_text = None
        record_copy.stack_info = None
        rendered = super().format(record_copy)
        index = rendered.find(placeholder)
        return rendered[:index] if index != -1 else ""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        message = self._apply_level_color(message, record.levelno)

        prefix = self._prefix(record)
        indent = " " * len(prefix)
        lines = message.split("\n")
        formatted = [f"{prefix}{lines[0].lstrip()}"]
        formatted.extend(f"{indent}{line.lstrip()}" for line in lines[1:])
        return "\n".join(formatted)


class _LoggingState:
    """Manages logging initialization state."""

    initialized: bool = False
    handlers: list[logging.Handler] = []


def setup_logging(
    log_file: Optional[str | Path] = None,
    log_level: str = "INFO",
    enable_file_logging: bool = True,
    max_log_size_mb: int = 10,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Configure the root logger with console and rotating file handlers.

    Args:
        log_file: Path of the log file; ``None`` disables file logging.
        log_level: Minimum level for the handlers (e.g. "DEBUG", "INFO").
        enable_file_logging: Set False to log to the console only.
        max_log_size_mb: Rotation size for the file handler.
        backup_count: Number of rotated files kept.

    Returns:
        The configured root logger.
    """
    root = logging.getLogger()
    numeric_log_level = getattr(logging, log_level.upper(), logging.INFO)

    if _LoggingState.initialized:
        for handler in _LoggingState.handlers:
            handler.setLevel(numeric_log_level)
        root.setLevel(min(numeric_log_level, logging.INFO))
        return root

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(
        AlignedMessageFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT, use_color=sys.stderr.isatty())
    )
    console_handler.setLevel(numeric_log_level)
    console_handler.addFilter(RemoteConnectionFilter())
    console_handler.addFilter(NameFilter(list(NOISY_LOGGERS)))
    handlers: list[logging.Handler] = [console_handler]

    if enable_file_logging and log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_log_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(AlignedMessageFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        file_handler.setLevel(numeric_log_level)
        file_handler.addFilter(RemoteConnectionFilter())
        handlers.append(file_handler)

    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(min(numeric_log_level, logging.INFO))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("undetected_chromedriver").setLevel(logging.ERROR)

    _LoggingState.handlers = handlers
    _LoggingState.initialized = True
    return root


def setup_logging_from_config() -> logging.Logger:
    """Configure logging from the logging section of the harness configuration."""
    from config import get_config_manager

    cfg = get_config_manager().get_config().logging
    return setup_logging(
        log_file=cfg.log_file,
        log_level=cfg.log_level,
        enable_file_logging=cfg.enable_file_logging,
        max_log_size_mb=cfg.max_log_size_mb,
        backup_count=cfg.backup_count,
    )


def reset_logging() -> None:
    """Remove the handlers installed by setup_logging."""
    root = logging.getLogger()
    for handler in _LoggingState.handlers:
        root.removeHandler(handler)
        handler.close()
    _LoggingState.handlers = []
    _LoggingState.initialized = False


__all__ = [
    "DATE_FORMAT",
    "LOG_FORMAT",
    "AlignedMessageFormatter",
    "NameFilter",
    "RemoteConnectionFilter",
    "reset_logging",
    "setup_logging",
    "setup_logging_from_config",
]
