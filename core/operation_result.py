#!/usr/bin/env python3

"""
Typed outcome of a single safe browser call.

Safe operations never raise across component boundaries; they return an
`OperationResult` so callers and the result sink can always record what
happened.
"""

from dataclasses import dataclass, replace
from typing import Any, Generic, Optional, TypeVar

from core.exceptions import (
    ErrorKind,
    HarnessError,
    OperationTimeoutError,
    SessionLostError,
    classify_exception,
    describe_exception,
)

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of one safe navigation or read call."""

    success: bool
    value: Optional[T] = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""
    attempts: int = 1
    recreated: bool = False
    fatal: bool = False

    @classmethod
    def ok(cls, value: Optional[T] = None, attempts: int = 1) -> "OperationResult[T]":
        return cls(success=True, value=value, attempts=attempts)

    @classmethod
    def failed(
        cls, error_kind: ErrorKind, message: str, attempts: int = 1, fatal: bool = False
    ) -> "OperationResult[T]":
        return cls(success=False, error_kind=error_kind, message=message, attempts=attempts, fatal=fatal)

    @classmethod
    def from_exception(cls, exc: BaseException, operation: str = "") -> "OperationResult[T]":
        prefix = f"{operation}: " if operation else ""
        return cls.failed(classify_exception(exc), f"{prefix}{describe_exception(exc)}")

    @property
    def session_lost(self) -> bool:
        return self.error_kind is ErrorKind.SESSION_LOST

    @property
    def timed_out(self) -> bool:
        return self.error_kind is ErrorKind.TIMEOUT

    def after_recovery(self, attempts: int) -> "OperationResult[T]":
        """Return a copy marked as the outcome of a post-recreation retry."""
        return replace(self, attempts=attempts, recreated=True, fatal=not self.success)

    def unwrap(self) -> Any:
        """Return the value, or raise the typed error matching the failure kind."""
        if self.success:
            return self.value
        if self.session_lost:
            raise SessionLostError(self.message)
        if self.timed_out:
            raise OperationTimeoutError(self.message)
        raise HarnessError(self.message or "Operation failed")

    def __bool__(self) -> bool:
        return self.success


__all__ = ["OperationResult"]
