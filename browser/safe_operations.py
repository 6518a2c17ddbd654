#!/usr/bin/env python3

"""
Safe Operation Wrapper.

Every browser command issued by a test goes through this module. Failures
are classified once, here, into lost session / timeout / other and returned
as ``OperationResult`` values instead of exceptions.

Two layers:

- Module functions (``navigate``, ``get_current_url``, ``get_title``,
  ``get_page_source``, ``wait_for_page_ready``) run one command against a
  given session and never raise. A lost session is marked dead.
- ``SafeOperations`` binds those functions to a worker's ``BrowserManager``
  and adds the recovery rule: after a lost session, recreate it once and
  retry the operation once. A second failure is returned as fatal.
"""

import logging
import time
from collections.abc import Callable
from typing import Any, Optional, TypeVar

from selenium.common.exceptions import (
    ElementClickInterceptedException,
    ElementNotInteractableException,
    InvalidElementStateException,
)
from selenium.webdriver.remote.webelement import WebElement

from browser.driver_factory import BrowserSession
from browser.selenium_utils import FallbackLocator, find_first, js_click, js_set_value, scroll_to_element
from core.browser_manager import BrowserManager
from core.exceptions import (
    ErrorKind,
    OperationTimeoutError,
    SessionCreationError,
    classify_exception,
    describe_exception,
)
from core.operation_result import OperationResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

READY_STATE_SCRIPT = "return document.readyState"
JQUERY_IDLE_SCRIPT = "return (typeof jQuery === 'undefined') || jQuery.active === 0"
DEFAULT_POLL_INTERVAL = 0.1


def _execute(session: Optional[BrowserSession], operation: str, command: Callable[[Any], T]) -> OperationResult[T]:
    """Run ``command(driver)`` and turn any failure into a classified result."""
    if session is None or not session.live:
        return OperationResult.failed(ErrorKind.SESSION_LOST, f"{operation}: no live browser session")
    try:
        return OperationResult.ok(command(session.driver))
    except Exception as e:
        result: OperationResult[T] = OperationResult.from_exception(e, operation)
        if result.session_lost:
            session.mark_dead(operation)
            logger.warning(f"Session lost during {operation}: {describe_exception(e)}")
        else:
            logger.debug(f"{operation} failed [{result.error_kind.value if result.error_kind else ''}]: {e}")
        return result


def navigate(session: Optional[BrowserSession], url: str) -> OperationResult[None]:
    """Load ``url`` in the session's current window."""
    if not url or not url.strip():
        return OperationResult.failed(ErrorKind.OTHER, "navigate: target URL is empty")

    def _get(driver: Any) -> None:
        logger.debug(f"Navigating to URL: {url}")
        driver.get(url)

    return _execute(session, "navigate", _get)


def get_current_url(session: Optional[BrowserSession]) -> OperationResult[str]:
    return _execute(session, "get_current_url", lambda driver: str(driver.current_url))


def get_title(session: Optional[BrowserSession]) -> OperationResult[str]:
    return _execute(session, "get_title", lambda driver: str(driver.title or ""))


def get_page_source(session: Optional[BrowserSession]) -> OperationResult[str]:
    return _execute(session, "get_page_source", lambda driver: str(driver.page_source or ""))


def _page_is_ready(driver: Any) -> bool:
    state = driver.execute_script(READY_STATE_SCRIPT)
    if state != "complete":
        return False
    return bool(driver.execute_script(JQUERY_IDLE_SCRIPT))


def wait_for_page_ready(
    session: Optional[BrowserSession],
    timeout_ms: int,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> OperationResult[None]:
    """
    Poll the document ready state until it is complete or ``timeout_ms`` elapses.

    The check runs before any sleep, so ``timeout_ms <= 0`` performs exactly
    one check and returns without waiting. Script errors that do not mean a
    lost session count as "not ready yet".
    """
    if session is None or not session.live:
        return OperationResult.failed(ErrorKind.SESSION_LOST, "wait_for_page_ready: no live browser session")

    deadline = time.monotonic() + max(timeout_ms, 0) / 1000
    checks = 0
    last_error = ""
    while True:
        checks += 1
        try:
            if _page_is_ready(session.driver):
                return OperationResult.ok()
        except Exception as e:
            if classify_exception(e) is ErrorKind.SESSION_LOST:
                session.mark_dead("wait_for_page_ready")
                return OperationResult.from_exception(e, "wait_for_page_ready")
            last_error = f" (last error: {describe_exception(e)})"

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return OperationResult.failed(
                ErrorKind.TIMEOUT,
                f"wait_for_page_ready: page not ready after {max(timeout_ms, 0)}ms ({checks} checks){last_error}",
            )
        time.sleep(min(poll_interval, remaining))


class SafeOperations:
    """
    Safe browser operations bound to one worker's browser context.

    Operations are serialized on the manager's lock, so only one logical
    operation is ever in flight on the worker's session.
    """

    def __init__(self, manager: BrowserManager, poll_interval: float = DEFAULT_POLL_INTERVAL) -> None:
        self.manager = manager
        self.poll_interval = poll_interval

    def _run(self, operation: str, op: Callable[[BrowserSession], OperationResult[T]]) -> OperationResult[T]:
        with self.manager.lock:
            session = self.manager.session
            if session is None or not session.live:
                try:
                    session = self.manager.ensure_session()
                except SessionCreationError as e:
                    return OperationResult.failed(
                        ErrorKind.SESSION_LOST, f"{operation}: no browser session: {e.message}", fatal=True
                    )

            result = op(session)
            if result.success or not result.session_lost:
                return result

            logger.info(f"{operation}: session lost, recreating once and retrying")
            try:
                session = self.manager.replace_session()
            except SessionCreationError as e:
                return OperationResult.failed(
                    ErrorKind.SESSION_LOST,
                    f"{operation}: session lost and recreation failed: {e.message}",
                    fatal=True,
                )

            retried = op(session).after_recovery(2)
            if not retried.success:
                logger.error(f"{operation} failed again after session recreation: {retried.message}")
            return retried

    # --- Navigation and reads ---

    def safe_navigate(self, url: str) -> OperationResult[None]:
        return self._run("navigate", lambda s: navigate(s, url))

    def safe_get_current_url(self) -> OperationResult[str]:
        return self._run("get_current_url", get_current_url)

    def safe_get_title(self) -> OperationResult[str]:
        return self._run("get_title", get_title)

    def safe_get_page_source(self) -> OperationResult[str]:
        return self._run("get_page_source", get_page_source)

    def wait_for_page_ready(self, timeout_ms: int) -> OperationResult[None]:
        return self._run("wait_for_page_ready", lambda s: wait_for_page_ready(s, timeout_ms, self.poll_interval))

    def open_page(self, url: str, timeout_ms: Optional[int] = None) -> OperationResult[None]:
        """Navigate, then wait for the page to be ready."""
        with self.manager.lock:
            nav = self.safe_navigate(url)
            if not nav.success:
                return nav
            if timeout_ms is None:
                timeout_ms = self.manager.config.page_load_timeout * 1000
            return self.wait_for_page_ready(timeout_ms)

    # --- Elements ---

    def _default_timeout(self, timeout: Optional[float]) -> float:
        return float(self.manager.config.explicit_wait) if timeout is None else timeout

    def safe_find_element(self, locator: FallbackLocator, timeout: Optional[float] = None) -> OperationResult[WebElement]:
        """Return the first element matched by ``locator``; not found is a timeout."""
        wait_s = self._default_timeout(timeout)

        def _find(session: BrowserSession) -> OperationResult[WebElement]:
            found = _execute(session, f"find {locator.name}", lambda driver: find_first(driver, locator, wait_s))
            if found.success and found.value is None:
                return OperationResult.failed(
                    ErrorKind.TIMEOUT, f"find {locator.name}: no element matched within {wait_s:.1f}s"
                )
            return found

        return self._run(f"find {locator.name}", _find)

    def safe_find_all(self, locator: FallbackLocator) -> OperationResult[list[WebElement]]:
        """Every element matched by any candidate, in candidate then document order. No wait."""

        def _collect(driver: Any) -> list[WebElement]:
            found: list[WebElement] = []
            for candidate in locator.candidates:
                found.extend(driver.find_elements(candidate.by, candidate.value))
            return found

        return self._run(f"find all {locator.name}", lambda s: _execute(s, f"find all {locator.name}", _collect))

    def safe_is_present(self, locator: FallbackLocator, timeout: float = 0.0) -> bool:
        return self.safe_find_element(locator, timeout).success

    def safe_click(self, locator: FallbackLocator, timeout: Optional[float] = None) -> OperationResult[None]:
        """Click the element, falling back to a JavaScript click when the native click is blocked."""
        wait_s = self._default_timeout(timeout)

        def _click(driver: Any) -> None:
            element = find_first(driver, locator, wait_s, require_displayed=True) or find_first(driver, locator, 0)
            if element is None:
                raise OperationTimeoutError(f"No element matched {locator.name} within {wait_s:.1f}s")
            scroll_to_element(driver, element)
            try:
                element.click()
            except (ElementClickInterceptedException, ElementNotInteractableException) as e:
                logger.debug(f"Native click on {locator.name} failed ({type(e).__name__}); using JavaScript click")
                js_click(driver, element)

        return self._run(f"click {locator.name}", lambda s: _execute(s, f"click {locator.name}", _click))

    def safe_send_keys(
        self, locator: FallbackLocator, text: str, timeout: Optional[float] = None, clear: bool = True
    ) -> OperationResult[None]:
        """Type into the element, falling back to setting its value through JavaScript."""
        wait_s = self._default_timeout(timeout)

        def _type(driver: Any) -> None:
            element = find_first(driver, locator, wait_s)
            if element is None:
                raise OperationTimeoutError(f"No element matched {locator.name} within {wait_s:.1f}s")
            try:
                if clear:
                    element.clear()
                element.send_keys(text)
            except (ElementNotInteractableException, InvalidElementStateException) as e:
                logger.debug(f"send_keys on {locator.name} failed ({type(e).__name__}); setting value via JavaScript")
                js_set_value(driver, element, text)

        return self._run(f"type {locator.name}", lambda s: _execute(s, f"type {locator.name}", _type))


__all__ = [
    "JQUERY_IDLE_SCRIPT",
    "READY_STATE_SCRIPT",
    "SafeOperations",
    "get_current_url",
    "get_page_source",
    "get_title",
    "navigate",
    "wait_for_page_ready",
]
