#!/usr/bin/env python3

"""
Error handling helpers shared across the harness.

`safe_execute` is for best-effort helpers whose failure should degrade to a
default value (visibility checks, text extraction).
"""

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any, Optional

logger = logging.getLogger(__name__)


def safe_execute(
    default_return: Any = None, log_errors: bool = True, error_message: Optional[str] = None
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator to safely execute a function with error handling.

    Usage:
        @safe_execute(default_return=False)
        def my_func(): ...
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                if log_errors:
                    msg = error_message or f"Error in {func.__name__}: {e}"
                    logger.warning(msg)
                return default_return

        return wrapper

    return decorator


__all__ = ["safe_execute"]
