#!/usr/bin/env python3

"""
Session Health Checker.

Decides whether an existing browser session can be reused. A cheap liveness
probe (reading the current URL) runs with a short, hard timeout; a session
that fails or hangs is closed best-effort and replaced with a fresh one.

The probe and the close run on daemon threads joined with a timeout, so a
browser that stopped answering can never hang the calling test.
"""

import logging
import threading
from collections.abc import Callable
from typing import Any, Optional

from browser.driver_factory import BrowserSession, create_session
from config.config_schema import MAX_PROBE_TIMEOUT, SeleniumConfig
from core.exceptions import classify_exception, describe_exception
from core.process_cleanup import driver_service_pid, kill_process_tree

logger = logging.getLogger(__name__)

SessionFactory = Callable[[SeleniumConfig], BrowserSession]


class _BoundedCall:
    """Run a callable on a daemon thread and wait at most ``timeout`` seconds."""

    def __init__(self, func: Callable[[], Any], name: str) -> None:
        self.func = func
        self.result: Any = None
        self.error: Optional[BaseException] = None
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def _run(self) -> None:
        try:
            self.result = self.func()
        except Exception as e:
            self.error = e

    def run(self, timeout: float) -> bool:
        """Return True if the call finished within ``timeout``."""
        self._thread.start()
        self._thread.join(timeout)
        return not self._thread.is_alive()


class SessionHealthChecker:
    """Probe, close and replace browser sessions."""

    def __init__(
        self,
        factory: Optional[SessionFactory] = None,
        probe_timeout: Optional[float] = None,
        close_timeout: Optional[float] = None,
    ) -> None:
        self.factory: SessionFactory = factory or create_session
        self._probe_timeout = probe_timeout
        self._close_timeout = close_timeout

    def _timeouts_for(self, session: BrowserSession) -> tuple[float, float]:
        probe = self._probe_timeout if self._probe_timeout is not None else session.config.probe_timeout
        close = self._close_timeout if self._close_timeout is not None else session.config.close_timeout
        return min(probe, MAX_PROBE_TIMEOUT), close

    def probe(self, session: Optional[BrowserSession]) -> bool:
        """
        Return True when ``session`` answers a trivial command in time.

        A session already flagged dead fails without touching the browser.
        """
        if session is None or not session.live:
            return False

        probe_timeout, _ = self._timeouts_for(session)
        call = _BoundedCall(lambda: session.driver.current_url, name="session-probe")
        if not call.run(probe_timeout):
            logger.warning(f"Liveness probe timed out after {probe_timeout:.1f}s for session {session.session_id}")
            return False
        if call.error is not None:
            kind = classify_exception(call.error)
            logger.warning(
                f"Liveness probe failed for session {session.session_id} [{kind.value}]: {describe_exception(call.error)}"
            )
            return False
        return True

    def close(self, session: Optional[BrowserSession]) -> None:
        """
        Best-effort close. Never raises.

        A quit that errors is logged; a quit that hangs past the close timeout
        falls back to killing the driver service process tree.
        """
        if session is None:
            return
        session.mark_dead("closing")
        _, close_timeout = self._timeouts_for(session)
        driver = session.driver
        pid = driver_service_pid(driver)

        call = _BoundedCall(driver.quit, name="session-close")
        if not call.run(close_timeout):
            logger.warning(f"quit() did not return within {close_timeout:.1f}s for session {session.session_id}")
            if pid is not None:
                kill_process_tree(pid)
            return
        if call.error is not None:
            logger.debug(f"Ignoring error while closing session {session.session_id}: {call.error}")
            if pid is not None:
                kill_process_tree(pid)
            return
        logger.debug(f"Closed session {session.session_id}")

    def get_or_recreate(self, current: Optional[BrowserSession], config: SeleniumConfig) -> BrowserSession:
        """
        Return ``current`` if it passes the liveness probe, otherwise a new session.

        Raises:
            SessionCreationError: a replacement session could not be started.
        """
        if current is None:
            return self.factory(config)

        if self.probe(current):
            return current

        current.mark_dead("failed liveness probe")
        self.close(current)
        logger.info(f"Recreating {config.browser} session after failed liveness probe")
        return self.factory(config)


def get_or_recreate(current: Optional[BrowserSession], config: SeleniumConfig) -> BrowserSession:
    """Module-level convenience using the default factory."""
    return SessionHealthChecker().get_or_recreate(current, config)


__all__ = ["SessionHealthChecker", "get_or_recreate"]
