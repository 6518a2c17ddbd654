#!/usr/bin/env python3

"""
Page Objects for the gateway's login and payment pages.

Page objects only compose ``SafeOperations`` calls with the fallback
locators in ``gateway.locators``; every action returns an
``OperationResult`` and never raises.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Optional

from browser.safe_operations import SafeOperations
from browser.selenium_utils import FallbackLocator, extract_text
from config.config_schema import TargetConfig
from core.operation_result import OperationResult
from gateway import locators
from gateway.test_data import PaymentCard

logger = logging.getLogger(__name__)

Step = Callable[[], OperationResult[None]]


def run_steps(steps: Iterable[Step]) -> OperationResult[None]:
    """Run steps in order and stop at the first failure."""
    attempts = 1
    for step in steps:
        result = step()
        attempts = max(attempts, result.attempts)
        if not result.success:
            return result
    return OperationResult.ok(attempts=attempts)


class BasePage:
    """Common page behavior: open, read the title, check required fields."""

    REQUIRED_FIELDS: tuple[FallbackLocator, ...] = ()

    def __init__(self, ops: SafeOperations, url: str, timeout_ms: Optional[int] = None) -> None:
        self.ops = ops
        self.url = url
        self.timeout_ms = timeout_ms

    def open(self) -> OperationResult[None]:
        logger.debug(f"Opening {type(self).__name__} at {self.url}")
        return self.ops.open_page(self.url, self.timeout_ms)

    def title(self) -> OperationResult[str]:
        return self.ops.safe_get_title()

    def current_url(self) -> OperationResult[str]:
        return self.ops.safe_get_current_url()

    def missing_fields(self, timeout: float = 0.0) -> list[str]:
        """Names of required fields not found on the page."""
        return [loc.name for loc in self.REQUIRED_FIELDS if not self.ops.safe_is_present(loc, timeout)]

    def has_required_fields(self, timeout: float = 0.0) -> bool:
        return not self.missing_fields(timeout)

    def _message(self, locator: FallbackLocator, timeout: float) -> str:
        found = self.ops.safe_find_element(locator, timeout)
        return extract_text(found.value).strip() if found.success else ""


class LoginPage(BasePage):
    REQUIRED_FIELDS = locators.LOGIN_FORM_FIELDS

    @classmethod
    def from_config(cls, ops: SafeOperations, target: TargetConfig) -> "LoginPage":
        return cls(ops, target.login_url)

    def enter_username(self, username: str) -> OperationResult[None]:
        return self.ops.safe_send_keys(locators.USERNAME_INPUT, username)

    def enter_password(self, password: str) -> OperationResult[None]:
        return self.ops.safe_send_keys(locators.PASSWORD_INPUT, password)

    def submit(self) -> OperationResult[None]:
        return self.ops.safe_click(locators.LOGIN_BUTTON)

    def login(self, username: str, password: str) -> OperationResult[None]:
        return run_steps(
            [
                lambda: self.enter_username(username),
                lambda: self.enter_password(password),
                self.submit,
            ]
        )

    def error_message(self, timeout: float = 0.0) -> str:
        return self._message(locators.LOGIN_ERROR_MESSAGE, timeout)


class PaymentPage(BasePage):
    REQUIRED_FIELDS = locators.PAYMENT_FORM_FIELDS

    @classmethod
    def from_config(cls, ops: SafeOperations, target: TargetConfig) -> "PaymentPage":
        return cls(ops, target.payment_url)

    def fill_card(self, card: PaymentCard) -> OperationResult[None]:
        logger.debug(f"Filling payment form with {card}")
        return run_steps(
            [
                lambda: self.ops.safe_send_keys(locators.CARD_NUMBER_INPUT, card.number),
                lambda: self.ops.safe_send_keys(locators.CARD_HOLDER_INPUT, card.holder),
                lambda: self.ops.safe_send_keys(locators.EXPIRY_MONTH_INPUT, card.expiry_month, clear=False),
                lambda: self.ops.safe_send_keys(locators.EXPIRY_YEAR_INPUT, card.expiry_year, clear=False),
                lambda: self.ops.safe_send_keys(locators.CVV_INPUT, card.cvv),
            ]
        )

    def enter_amount(self, amount: str) -> OperationResult[None]:
        return self.ops.safe_send_keys(locators.AMOUNT_INPUT, amount)

    def select_installment(self, installments: int) -> OperationResult[None]:
        return self.ops.safe_send_keys(locators.INSTALLMENT_SELECT, str(installments), clear=False)

    def pay(self) -> OperationResult[None]:
        return self.ops.safe_click(locators.PAY_BUTTON)

    def error_message(self, timeout: float = 0.0) -> str:
        return self._message(locators.PAYMENT_ERROR_MESSAGE, timeout)


__all__ = ["BasePage", "LoginPage", "PaymentPage", "run_steps"]
