#!/usr/bin/env python3

"""
UI smoke suite for the configured gateway pages.

Checks that the base URL loads, the page has a title, and the login and
payment forms expose their required fields. Every test starts from a
health-checked browser session; failures are screenshotted.
"""

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parent.parent))

from browser.safe_operations import SafeOperations
from config import get_config_manager
from core.browser_manager import get_browser_manager
from core.retry import RetryPolicy
from gateway.pages import LoginPage, PaymentPage
from testing.test_framework import TestSuite
from testing.test_utilities import create_standard_test_runner

GROUPS = ("smoke", "ui")


def smoke_suite_tests() -> bool:
    config = get_config_manager().get_config()
    target = config.target

    if not target.ui_configured:
        suite = TestSuite("Gateway UI Smoke", __name__)
        suite.start_suite()
        suite.add_warning("GATEWAY_BASE_URL is not set; UI smoke suite skipped")
        return suite.finish_suite()

    manager = get_browser_manager(config.selenium)
    suite = TestSuite(
        "Gateway UI Smoke",
        __name__,
        browser_manager=manager,
        retry_policy=RetryPolicy.from_config(config.run),
        screenshot_on_pass=config.reporting.screenshot_on_pass,
    )
    suite.start_suite()

    ops = SafeOperations(manager)
    wait_s = float(config.selenium.explicit_wait)
    login_page = LoginPage.from_config(ops, target)
    payment_page = PaymentPage.from_config(ops, target)

    def test_base_url_reachable() -> None:
        result = ops.open_page(target.base_url)
        assert result.success, result.message

    def test_page_has_title() -> None:
        opened = ops.open_page(target.base_url)
        assert opened.success, opened.message
        title = ops.safe_get_title()
        assert title.success, title.message
        assert title.value and title.value.strip(), "Page title is empty"

    def test_login_form_fields() -> None:
        opened = login_page.open()
        assert opened.success, opened.message
        missing = login_page.missing_fields(timeout=wait_s)
        assert not missing, f"Login page is missing: {', '.join(missing)}"

    def test_payment_form_fields() -> None:
        opened = payment_page.open()
        assert opened.success, opened.message
        missing = payment_page.missing_fields(timeout=wait_s)
        assert not missing, f"Payment page is missing: {', '.join(missing)}"

    suite.run_test(
        "Base URL reachable",
        test_base_url_reachable,
        test_summary=f"Open {target.base_url} and wait for the page to be ready",
        functions_tested="SafeOperations.open_page",
        expected_outcome="Navigation and readiness wait both succeed",
        groups=GROUPS,
    )
    suite.run_test(
        "Page title present",
        test_page_has_title,
        test_summary="Read the document title of the base page",
        functions_tested="SafeOperations.safe_get_title",
        expected_outcome="A non-empty title",
        groups=GROUPS,
    )
    if target.login_path:
        suite.run_test(
            "Login form fields present",
            test_login_form_fields,
            test_summary=f"Open {target.login_url} and look for username, password and submit",
            functions_tested="LoginPage.open, LoginPage.missing_fields",
            expected_outcome="Every required login field is found",
            groups=GROUPS,
        )
    else:
        suite.add_warning("GATEWAY_LOGIN_PATH is not set; login form check skipped")
    if target.payment_path:
        suite.run_test(
            "Payment form fields present",
            test_payment_form_fields,
            test_summary=f"Open {target.payment_url} and look for card number, expiry, CVV and pay button",
            functions_tested="PaymentPage.open, PaymentPage.missing_fields",
            expected_outcome="Every required payment field is found",
            groups=GROUPS,
        )
    else:
        suite.add_warning("GATEWAY_PAYMENT_PATH is not set; payment form check skipped")

    return suite.finish_suite()


run_suite = create_standard_test_runner(smoke_suite_tests)


if __name__ == "__main__":
    sys.exit(0 if run_suite() else 1)
