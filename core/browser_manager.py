#!/usr/bin/env python3

"""
Browser Manager - per-worker browser context.

Each worker (thread) owns exactly one ``BrowserManager`` and, through it, at
most one browser session. The manager is the only place the session is
replaced: ``ensure_session`` probes and recreates, ``replace_session``
discards a session that was reported lost, ``close`` force-closes it at
teardown. Sessions are never shared between workers.
"""

import logging
import threading
import time
from types import TracebackType
from typing import Optional

from browser.driver_factory import BrowserSession
from browser.session_health import SessionHealthChecker
from config.config_schema import SeleniumConfig

logger = logging.getLogger(__name__)


class BrowserManager:
    """Owns one worker's browser session and its replace-on-failure contract."""

    def __init__(
        self,
        config: Optional[SeleniumConfig] = None,
        checker: Optional[SessionHealthChecker] = None,
    ) -> None:
        if config is None:
            from config import get_config_manager

            config = get_config_manager().get_config().selenium
        self.config: SeleniumConfig = config
        self.checker = checker or SessionHealthChecker()
        self.session: Optional[BrowserSession] = None
        self.sessions_created = 0
        self.recreations = 0
        self.lock = threading.RLock()
        self.owner_thread = threading.current_thread().name
        logger.debug(f"BrowserManager initialized for {self.owner_thread} ({config.browser})")

    @property
    def driver(self):
        return self.session.driver if self.session is not None else None

    @property
    def driver_live(self) -> bool:
        return self.session is not None and self.session.live

    def _adopt(self, new_session: BrowserSession) -> BrowserSession:
        if new_session is not self.session:
            if self.session is not None:
                self.recreations += 1
            self.sessions_created += 1
            self.session = new_session
        return new_session

    def ensure_session(self) -> BrowserSession:
        """
        Return a session that just passed its liveness probe.

        Raises:
            SessionCreationError: no session could be started.
        """
        with self.lock:
            start = time.time()
            current = self.session
            try:
                session = self.checker.get_or_recreate(current, self.config)
            except Exception:
                if current is not None and not current.live:
                    self.session = None
                raise
            if session is not current:
                logger.debug(f"New browser session ready in {time.time() - start:.2f}s: {session!r}")
            return self._adopt(session)

    def replace_session(self) -> BrowserSession:
        """Discard the current session and start a new one."""
        with self.lock:
            if self.session is not None:
                self.session.mark_dead("replacement requested")
            return self.ensure_session()

    def is_session_valid(self) -> bool:
        with self.lock:
            return self.checker.probe(self.session)

    def close(self) -> None:
        """Close the session, if any. Never raises."""
        with self.lock:
            if self.session is None:
                return
            self.checker.close(self.session)
            self.session = None

    def __enter__(self) -> "BrowserManager":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()


class _WorkerManagers:
    """Registry of per-thread managers so teardown can close every one."""

    local = threading.local()
    all_managers: list[BrowserManager] = []
    registry_lock = threading.Lock()


def get_browser_manager(config: Optional[SeleniumConfig] = None) -> BrowserManager:
    """Return the calling thread's BrowserManager, creating it on first use."""
    manager: Optional[BrowserManager] = getattr(_WorkerManagers.local, "manager", None)
    if manager is None:
        manager = BrowserManager(config)
        _WorkerManagers.local.manager = manager
        with _WorkerManagers.registry_lock:
            _WorkerManagers.all_managers.append(manager)
    return manager


def close_browser_managers() -> int:
    """Close every worker's session. Returns how many sessions were open."""
    with _WorkerManagers.registry_lock:
        managers = list(_WorkerManagers.all_managers)
        _WorkerManagers.all_managers.clear()
    open_sessions = 0
    for manager in managers:
        if manager.session is not None:
            open_sessions += 1
        manager.close()
    _WorkerManagers.local = threading.local()
    return open_sessions


__all__ = ["BrowserManager", "close_browser_managers", "get_browser_manager"]
