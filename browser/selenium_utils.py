#!/usr/bin/env python3

"""Selenium/WebDriver Utilities for Browser Automation.

Element helpers used by the safe operation layer and the page objects:
declarative fallback locators, a bounded first-match lookup, and small
best-effort readers that degrade to a default instead of raising.
"""

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional, Protocol, cast

from selenium.common.exceptions import StaleElementReferenceException
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement

from core.error_handling import safe_execute

logger = logging.getLogger(__name__)

FIND_POLL_INTERVAL = 0.25


# --- Protocols ---


class DriverProtocol(Protocol):
    """WebDriver surface used by the helpers in this module."""

    def execute_script(self, script: str, *args: object) -> object: ...

    def find_elements(self, by: str, value: str) -> list[WebElement]: ...


class WebElementProtocol(Protocol):
    """Protocol for WebElement to ensure strict typing."""

    def get_attribute(self, name: str) -> Optional[str]: ...

    def click(self) -> None: ...

    def clear(self) -> None: ...

    def send_keys(self, *value: object) -> None: ...

    @property
    def text(self) -> str: ...

    def is_displayed(self) -> bool: ...


# --- Locators ---


@dataclass(frozen=True)
class Locator:
    """One way of finding an element."""

    by: str
    value: str

    def __str__(self) -> str:
        return f"{self.by}={self.value}"


@dataclass(frozen=True)
class FallbackLocator:
    """
    Ordered list of locators for one logical element.

    Candidates are tried in declared order and the first candidate that
    matches anything wins; within that candidate the first element in
    document order is used.
    """

    name: str
    candidates: tuple[Locator, ...]

    def __post_init__(self) -> None:
        if not self.candidates:
            raise ValueError(f"FallbackLocator '{self.name}' needs at least one candidate")

    @classmethod
    def css(cls, name: str, *selectors: str) -> "FallbackLocator":
        return cls(name, tuple(Locator(By.CSS_SELECTOR, s) for s in selectors))

    @classmethod
    def xpath(cls, name: str, *expressions: str) -> "FallbackLocator":
        return cls(name, tuple(Locator(By.XPATH, x) for x in expressions))

    @classmethod
    def of(cls, name: str, pairs: Iterable[tuple[str, str]]) -> "FallbackLocator":
        return cls(name, tuple(Locator(by, value) for by, value in pairs))

    def __str__(self) -> str:
        return f"{self.name} [{' | '.join(str(c) for c in self.candidates)}]"


def match_first(driver: WebDriver, fallback: FallbackLocator, require_displayed: bool = False) -> Optional[WebElement]:
    """Single pass over the candidates; returns the winning element or None."""
    finder = cast(DriverProtocol, driver)
    for candidate in fallback.candidates:
        elements = finder.find_elements(candidate.by, candidate.value)
        for element in elements:
            if not require_displayed:
                return element
            try:
                if element.is_displayed():
                    return element
            except StaleElementReferenceException:
                continue
    return None


def find_first(
    driver: WebDriver,
    fallback: FallbackLocator,
    timeout: float = 0.0,
    require_displayed: bool = False,
    poll_interval: float = FIND_POLL_INTERVAL,
) -> Optional[WebElement]:
    """
    Poll for the first matching element for up to ``timeout`` seconds.

    Driver errors other than "not found" propagate so the caller can classify
    them; an element that never appears returns None.
    """
    deadline = time.monotonic() + max(timeout, 0.0)
    while True:
        element = match_first(driver, fallback, require_displayed=require_displayed)
        if element is not None:
            return element
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            logger.debug(f"No element matched {fallback} within {timeout:.1f}s")
            return None
        time.sleep(min(poll_interval, remaining))


# --- Best-effort helpers ---


@safe_execute(default_return="", log_errors=False)
def extract_text(element: Optional[WebElement]) -> str:
    """Extract text from an element safely with unified error handling."""
    if not element:
        return ""
    return cast(WebElementProtocol, element).text or ""


@safe_execute(default_return="", log_errors=False)
def extract_attribute(element: Optional[WebElement], attribute: str) -> str:
    """Extract attribute from an element safely with unified error handling."""
    if not element:
        return ""
    return cast(WebElementProtocol, element).get_attribute(attribute) or ""


@safe_execute(default_return=False, log_errors=False)
def is_element_visible(element: Optional[WebElement]) -> bool:
    """Check if element is visible with unified error handling."""
    if not element:
        return False
    return cast(WebElementProtocol, element).is_displayed()


@safe_execute(log_errors=False)
def scroll_to_element(driver: Optional[WebDriver], element: Optional[WebElement]) -> None:
    """Scroll element into view."""
    if not driver or not element:
        return
    cast(DriverProtocol, driver).execute_script("arguments[0].scrollIntoView({block: 'center'});", element)


def js_click(driver: WebDriver, element: WebElement) -> None:
    cast(DriverProtocol, driver).execute_script("arguments[0].click();", element)


def js_set_value(driver: WebDriver, element: WebElement, text: str) -> None:
    """Set an input's value and fire the events frameworks listen for."""
    cast(DriverProtocol, driver).execute_script(
        "arguments[0].value = arguments[1];"
        "arguments[0].dispatchEvent(new Event('input', {bubbles: true}));"
        "arguments[0].dispatchEvent(new Event('change', {bubbles: true}));",
        element,
        text,
    )


__all__ = [
    "DriverProtocol",
    "FallbackLocator",
    "Locator",
    "WebElementProtocol",
    "extract_attribute",
    "extract_text",
    "find_first",
    "is_element_visible",
    "js_click",
    "js_set_value",
    "match_first",
    "scroll_to_element",
]
