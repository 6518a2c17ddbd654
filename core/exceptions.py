#!/usr/bin/env python3

"""
Exception hierarchy and error classification for the E2E harness.

This module defines the base exception classes used throughout the harness
and the single place where browser failures are classified into the three
kinds the safe operation layer reports: lost session, timeout, or other.
"""

import logging
from enum import Enum
from typing import Any

from selenium.common.exceptions import (
    InvalidSessionIdException,
    NoSuchWindowException,
    TimeoutException,
    WebDriverException,
)

logger = logging.getLogger(__name__)


# === HARNESS EXCEPTION HIERARCHY ===


class HarnessError(Exception):
    """Base exception class for all harness errors."""

    def __init__(self, message: str = "Harness error occurred", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = kwargs.get("context") or {}
        self.recovery_hint: str | None = kwargs.get("recovery_hint")


class RetryableError(HarnessError):
    """Exception that indicates the operation can be retried."""

    def __init__(self, message: str = "Operation can be retried", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.retry_after = kwargs.get("retry_after")


class FatalError(HarnessError):
    """Exception that indicates the operation should not be retried."""

    def __init__(self, message: str = "Fatal error occurred", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class SessionCreationError(FatalError):
    """The browser process or automation session could not be started."""

    def __init__(self, message: str = "Browser session could not be created", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.browser = kwargs.get("browser")


class SessionLostError(RetryableError):
    """A previously live session became unusable."""

    def __init__(self, message: str = "Browser session lost", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.session_id = kwargs.get("session_id")


class OperationTimeoutError(RetryableError):
    """A bounded wait exceeded its budget."""

    def __init__(self, message: str = "Operation timed out", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.timeout_ms = kwargs.get("timeout_ms")


class GatewayApiError(RetryableError):
    """Transport-level failure talking to the gateway REST API."""

    def __init__(self, message: str = "Gateway API request failed", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.url = kwargs.get("url")
        self.method = kwargs.get("method")


class ReportWriteError(HarnessError):
    """A screenshot or report file could not be written."""

    def __init__(self, message: str = "Report artifact could not be written", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.path = kwargs.get("path")


class ConfigurationError(FatalError):
    """Exception for configuration errors."""

    def __init__(self, message: str = "Configuration error occurred", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.config_section = kwargs.get("config_section")


# === ERROR CLASSIFICATION ===


class ErrorKind(Enum):
    """Classification of a failed browser operation."""

    SESSION_LOST = "session_lost"
    TIMEOUT = "timeout"
    OTHER = "other"


# Lower-cased message fragments that mean the remote end is gone.
SESSION_LOST_PATTERNS: tuple[str, ...] = (
    "invalid session id",
    "session deleted",
    "no such session",
    "no such window",
    "target window already closed",
    "web view not found",
    "chrome not reachable",
    "browser has closed",
    "disconnected: not connected to devtools",
    "disconnected: received inspector.detached",
    "max retries exceeded",
    "connection refused",
    "failed to establish a new connection",
    "remote end closed connection",
)


def describe_exception(exc: BaseException) -> str:
    """Return ``TypeName: first line of message`` for log and result messages."""
    lines = str(exc).strip().splitlines()
    return f"{type(exc).__name__}: {lines[0]}" if lines else type(exc).__name__


def is_session_lost_message(message: str) -> bool:
    """Return True when an error message indicates a dead session."""
    lowered = message.lower()
    return any(pattern in lowered for pattern in SESSION_LOST_PATTERNS)


def classify_exception(exc: BaseException) -> ErrorKind:
    """
    Classify an exception raised by a browser command.

    Typed selenium exceptions are checked first; generic driver and transport
    errors fall back to message matching, since a dead chromedriver surfaces
    as a urllib3 connection error rather than a selenium type.
    """
    if isinstance(exc, (InvalidSessionIdException, NoSuchWindowException, SessionLostError)):
        return ErrorKind.SESSION_LOST
    if isinstance(exc, (TimeoutException, TimeoutError, OperationTimeoutError)):
        return ErrorKind.TIMEOUT
    from_transport = type(exc).__module__.startswith("urllib3")
    if isinstance(exc, (WebDriverException, OSError)) or from_transport:
        if is_session_lost_message(str(exc)):
            return ErrorKind.SESSION_LOST
        if from_transport and "timed out" in str(exc).lower():
            return ErrorKind.TIMEOUT
    return ErrorKind.OTHER


__all__ = [
    "SESSION_LOST_PATTERNS",
    "ConfigurationError",
    "ErrorKind",
    "FatalError",
    "GatewayApiError",
    "HarnessError",
    "OperationTimeoutError",
    "ReportWriteError",
    "RetryableError",
    "SessionCreationError",
    "SessionLostError",
    "classify_exception",
    "describe_exception",
    "is_session_lost_message",
]
