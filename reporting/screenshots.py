#!/usr/bin/env python3

"""
Screenshot capture for test results.

Screenshots are PNG files under ``<results_dir>/screenshots/`` named
``<sanitized test name>_<OUTCOME>_<YYYYmmdd_HHMMSS_mmm>.png``. Capture is
best-effort: any failure is logged and reported as ``None`` so the test's
result is still recorded.
"""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from browser.driver_factory import BrowserSession
from core.exceptions import ReportWriteError, describe_exception

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")
MAX_NAME_LENGTH = 80


def sanitize_test_name(name: str) -> str:
    """Reduce a test name to a file-system safe stem."""
    cleaned = _UNSAFE_CHARS.sub("_", name.strip()).strip("._")
    return cleaned[:MAX_NAME_LENGTH] or "test"


def screenshot_filename(test_name: str, outcome: str, when: Optional[datetime] = None) -> str:
    when = when or datetime.now()
    stamp = f"{when:%Y%m%d_%H%M%S}_{when.microsecond // 1000:03d}"
    return f"{sanitize_test_name(test_name)}_{outcome.upper()}_{stamp}.png"


def write_screenshot(session: BrowserSession, target: Path) -> Path:
    """
    Save the session's current viewport to ``target``.

    Raises:
        ReportWriteError: the browser could not produce an image or the file
            could not be written.
    """
    try:
        png = session.driver.get_screenshot_as_png()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(png)
    except Exception as e:
        raise ReportWriteError(f"Could not save screenshot: {describe_exception(e)}", path=str(target)) from e
    return target


def capture_screenshot(
    session: Optional[BrowserSession],
    screenshots_dir: Path,
    test_name: str,
    outcome: str,
) -> Optional[Path]:
    """Capture a screenshot for ``test_name``. Returns the file path or None."""
    if session is None or not session.live:
        logger.debug(f"No live session, skipping screenshot for '{test_name}'")
        return None
    target = Path(screenshots_dir) / screenshot_filename(test_name, outcome)
    try:
        path = write_screenshot(session, target)
    except ReportWriteError as e:
        logger.warning(f"Screenshot for '{test_name}' not saved: {e.message}")
        return None
    logger.debug(f"Screenshot saved: {path}")
    return path


__all__ = ["capture_screenshot", "sanitize_test_name", "screenshot_filename", "write_screenshot"]
