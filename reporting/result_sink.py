#!/usr/bin/env python3

"""
Result Sink - append-only store of TestResults for one run.

The sink never blocks a test on I/O: recording is an in-memory append under
a lock, and screenshot failures come back as ``None`` after being logged.
Report rendering lives in ``report_generator`` and only reads a snapshot of
the recorded sequence.
"""

import logging
import threading
from collections import Counter
from pathlib import Path
from typing import Optional

from browser.driver_factory import BrowserSession
from reporting import screenshots
from reporting.report_generator import ReportArtifact, generate_report, write_json_results, write_report
from reporting.test_result import TestResult, TestStatus

logger = logging.getLogger(__name__)


class ResultSink:
    """Thread-safe, append-only TestResult store."""

    def __init__(self, screenshots_dir: Optional[Path] = None) -> None:
        self._results: list[TestResult] = []
        self._lock = threading.Lock()
        self._screenshots_dir = Path(screenshots_dir) if screenshots_dir is not None else None

    @property
    def screenshots_dir(self) -> Path:
        if self._screenshots_dir is None:
            from config import get_config_manager

            self._screenshots_dir = get_config_manager().get_config().reporting.screenshots_dir
        return self._screenshots_dir

    def record_result(self, result: TestResult) -> None:
        """Append ``result``. The same object recorded twice appears twice."""
        with self._lock:
            self._results.append(result)
        logger.debug(f"Recorded {result.outcome} for '{result.name}'")

    @property
    def results(self) -> tuple[TestResult, ...]:
        """Snapshot of everything recorded so far, in insertion order."""
        with self._lock:
            return tuple(self._results)

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)

    def totals(self) -> dict[str, int]:
        snapshot = self.results
        by_status = Counter(r.outcome for r in snapshot)
        passed = sum(1 for r in snapshot if r.passed)
        return {
            "total": len(snapshot),
            "passed": passed,
            "failed": len(snapshot) - passed,
            "errors": by_status[TestStatus.ERROR.value],
        }

    def clear(self) -> None:
        with self._lock:
            self._results.clear()

    def capture_screenshot(self, session: Optional[BrowserSession], test_name: str, outcome: str) -> Optional[Path]:
        """Best-effort screenshot under this sink's screenshots directory."""
        return screenshots.capture_screenshot(session, self.screenshots_dir, test_name, outcome)

    def generate_report(self, title: str = "Test Report") -> ReportArtifact:
        return generate_report(self.results, title)

    def write_report(self, path: Path, title: str = "Test Report") -> Optional[Path]:
        return write_report(self.generate_report(title), path)

    def write_json(self, path: Path) -> Optional[Path]:
        return write_json_results(self.results, path)


class _DefaultSink:
    """Process-wide sink shared by suites that are not handed one."""

    instance: Optional[ResultSink] = None
    lock = threading.Lock()


def get_default_sink() -> ResultSink:
    with _DefaultSink.lock:
        if _DefaultSink.instance is None:
            _DefaultSink.instance = ResultSink()
        return _DefaultSink.instance


def reset_default_sink(sink: Optional[ResultSink] = None) -> ResultSink:
    """Replace the process-wide sink, returning the new one."""
    with _DefaultSink.lock:
        _DefaultSink.instance = sink or ResultSink()
        return _DefaultSink.instance


__all__ = ["ResultSink", "get_default_sink", "reset_default_sink"]
