#!/usr/bin/env python3

"""
Driver Factory.

Creates a browser automation session from a ``SeleniumConfig``. Chrome is
the default backend; Firefox and Edge are supported for cross-browser runs
and ``undetected_chromedriver`` can stand in for stock Chrome when a target
blocks automation fingerprints.

There is no retry loop here: a failed start raises ``SessionCreationError``
and the caller decides what to do.
"""

import contextlib
import dataclasses
import logging
import subprocess
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Optional

from selenium import webdriver
from selenium.webdriver.chrome.service import Service as ChromeService
from selenium.webdriver.remote.webdriver import WebDriver

from config.config_schema import SeleniumConfig
from core.exceptions import SessionCreationError, describe_exception

logger = logging.getLogger(__name__)

# Arguments every Chrome-family session starts with.
BASE_CHROME_ARGUMENTS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-extensions",
    "--no-first-run",
    "--no-default-browser-check",
)


@dataclass
class BrowserSession:
    """
    Handle to one running browser.

    Only the health checker and the safe operation layer change ``live``;
    tests receive sessions and never build them.
    """

    driver: WebDriver
    config: SeleniumConfig
    created_at: float = field(default_factory=time.time)
    live: bool = True

    @property
    def session_id(self) -> Optional[str]:
        return getattr(self.driver, "session_id", None)

    @property
    def age_seconds(self) -> float:
        return time.time() - self.created_at

    def mark_dead(self, reason: str = "") -> None:
        if self.live:
            logger.debug(f"Session {self.session_id} marked dead{': ' + reason if reason else ''}")
        self.live = False

    def __repr__(self) -> str:
        state = "live" if self.live else "dead"
        return f"BrowserSession(id={self.session_id!r}, browser={self.config.browser!r}, {state})"


def _chromium_arguments(config: SeleniumConfig) -> list[str]:
    args = list(BASE_CHROME_ARGUMENTS)
    if config.headless_mode:
        args.append("--headless=new")
    args.append(f"--window-size={config.window_width},{config.window_height}")
    if config.ignore_tls_errors:
        args.append("--ignore-certificate-errors")
    args.extend(config.extra_arguments)
    return args


def build_chrome_options(config: SeleniumConfig) -> webdriver.ChromeOptions:
    """Build Chrome options from configuration."""
    options = webdriver.ChromeOptions()
    for arg in _chromium_arguments(config):
        options.add_argument(arg)
    if config.ignore_tls_errors:
        options.accept_insecure_certs = True
    if config.chrome_browser_path:
        options.binary_location = str(config.chrome_browser_path)
    return options


def build_edge_options(config: SeleniumConfig) -> webdriver.EdgeOptions:
    options = webdriver.EdgeOptions()
    for arg in _chromium_arguments(config):
        options.add_argument(arg)
    if config.ignore_tls_errors:
        options.accept_insecure_certs = True
    return options


def build_firefox_options(config: SeleniumConfig) -> webdriver.FirefoxOptions:
    options = webdriver.FirefoxOptions()
    if config.headless_mode:
        options.add_argument("-headless")
    options.add_argument(f"--width={config.window_width}")
    options.add_argument(f"--height={config.window_height}")
    for arg in config.extra_arguments:
        options.add_argument(arg)
    if config.ignore_tls_errors:
        options.accept_insecure_certs = True
    return options


def _start_chrome(config: SeleniumConfig) -> WebDriver:
    if config.use_undetected_chrome:
        return _start_undetected_chrome(config)
    options = build_chrome_options(config)
    service_kwargs: dict[str, Any] = {"log_output": subprocess.DEVNULL}
    if config.chrome_driver_path:
        service_kwargs["executable_path"] = str(config.chrome_driver_path)
    return webdriver.Chrome(options=options, service=ChromeService(**service_kwargs))


def _start_undetected_chrome(config: SeleniumConfig) -> WebDriver:
    import undetected_chromedriver as uc

    options = uc.ChromeOptions()
    for arg in _chromium_arguments(config):
        options.add_argument(arg)
    kwargs: dict[str, Any] = {"options": options, "use_subprocess": False}
    if config.chrome_driver_path:
        kwargs["driver_executable_path"] = str(config.chrome_driver_path)
    if config.chrome_browser_path:
        kwargs["browser_executable_path"] = str(config.chrome_browser_path)
    return uc.Chrome(**kwargs)


def _start_firefox(config: SeleniumConfig) -> WebDriver:
    return webdriver.Firefox(options=build_firefox_options(config))


def _start_edge(config: SeleniumConfig) -> WebDriver:
    return webdriver.Edge(options=build_edge_options(config))


DRIVER_STARTERS: dict[str, Callable[[SeleniumConfig], WebDriver]] = {
    "chrome": _start_chrome,
    "firefox": _start_firefox,
    "edge": _start_edge,
}


def _configure_driver_post_init(driver: WebDriver, config: SeleniumConfig) -> None:
    """Apply timeouts and window size after the browser is up."""
    driver.implicitly_wait(config.implicit_wait_ms / 1000)
    driver.set_page_load_timeout(config.page_load_timeout)
    driver.set_script_timeout(config.script_timeout)
    if not config.headless_mode:
        driver.set_window_size(config.window_width, config.window_height)


def create_session(config: SeleniumConfig) -> BrowserSession:
    """
    Start a browser and return a live session.

    Raises:
        SessionCreationError: the browser or its driver could not be started
            or configured. The cause is chained.
    """
    starter = DRIVER_STARTERS.get(config.browser)
    if starter is None:
        raise SessionCreationError(f"Unsupported browser: {config.browser}", browser=config.browser)

    start_time = time.time()
    driver: Optional[WebDriver] = None
    try:
        driver = starter(config)
        _configure_driver_post_init(driver, config)
    except Exception as e:
        summary = describe_exception(e)
        logger.error(f"Failed to start {config.browser} session: {summary}")
        if driver is not None:
            with contextlib.suppress(Exception):
                driver.quit()
        raise SessionCreationError(
            f"Could not start {config.browser} session: {summary}",
            browser=config.browser,
            recovery_hint="Check that the browser and a matching driver are installed",
        ) from e

    session = BrowserSession(driver=driver, config=dataclasses.replace(config))
    logger.debug(
        f"Started {config.browser} session {session.session_id} "
        f"(headless={config.headless_mode}, {config.window_size}) in {time.time() - start_time:.2f}s"
    )
    return session


__all__ = [
    "BASE_CHROME_ARGUMENTS",
    "DRIVER_STARTERS",
    "BrowserSession",
    "build_chrome_options",
    "build_edge_options",
    "build_firefox_options",
    "create_session",
]
