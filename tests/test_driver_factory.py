import sys
from pathlib import Path

# Add project root to Python path to allow running script directly
sys.path.append(str(Path(__file__).resolve().parent.parent))

import subprocess
from unittest.mock import patch

from selenium.common.exceptions import WebDriverException

from browser.driver_factory import (
    DRIVER_STARTERS,
    BrowserSession,
    build_chrome_options,
    build_firefox_options,
    create_session,
)
from core.exceptions import SessionCreationError
from testing.fake_driver import FakeDriver
from testing.test_framework import TestSuite, suppress_logging
from testing.test_utilities import create_standard_test_runner, make_selenium_config


def _starter_returning(driver: FakeDriver):
    def _start(config):
        return driver

    return _start


def test_headless_session_is_live():
    driver = FakeDriver()
    config = make_selenium_config(headless_mode=True, window_width=1920, window_height=1080)
    with patch.dict(DRIVER_STARTERS, {"chrome": _starter_returning(driver)}):
        session = create_session(config)
    assert isinstance(session, BrowserSession)
    assert session.live
    assert session.driver is driver
    assert session.session_id == driver.session_id
    assert driver.timeouts == {"implicit": 0.0, "page_load": 30, "script": 30}
    # Headless windows are sized through the --window-size argument instead
    assert driver.window_size is None


def test_headed_session_sets_window_size():
    driver = FakeDriver()
    config = make_selenium_config(headless_mode=False, window_width=1280, window_height=800)
    with patch.dict(DRIVER_STARTERS, {"chrome": _starter_returning(driver)}):
        session = create_session(config)
    assert driver.window_size == (1280, 800)
    assert session.config.window_size == "1280,800"


def test_session_keeps_its_own_config_copy():
    config = make_selenium_config()
    with patch.dict(DRIVER_STARTERS, {"chrome": _starter_returning(FakeDriver())}):
        session = create_session(config)
    assert session.config == config
    assert session.config is not config


def test_start_failure_raises_session_creation_error():
    def _fail(config):
        raise WebDriverException("unknown error: cannot find Chrome binary")

    with patch.dict(DRIVER_STARTERS, {"chrome": _fail}):
        try:
            create_session(make_selenium_config())
        except SessionCreationError as e:
            assert e.browser == "chrome"
            assert "cannot find Chrome binary" in e.message
            assert isinstance(e.__cause__, WebDriverException)
        else:
            raise AssertionError("create_session did not raise")


def test_unexpected_start_error_is_wrapped():
    def _fail(config):
        raise RuntimeError("chromedriver exited with status 127")

    with patch.dict(DRIVER_STARTERS, {"chrome": _fail}):
        try:
            create_session(make_selenium_config())
        except SessionCreationError as e:
            assert "chromedriver exited" in e.message
            assert isinstance(e.__cause__, RuntimeError)
        else:
            raise AssertionError("create_session did not raise")


def test_partially_started_driver_is_quit():
    driver = FakeDriver()
    driver.fail_with(WebDriverException("timeouts could not be set"))
    with patch.dict(DRIVER_STARTERS, {"chrome": _starter_returning(driver)}):
        try:
            create_session(make_selenium_config())
        except SessionCreationError:
            pass
        else:
            raise AssertionError("create_session did not raise")
    assert driver.quit_calls == 1


def test_unsupported_browser_raises():
    with patch.dict(DRIVER_STARTERS, {}, clear=True):
        try:
            create_session(make_selenium_config())
        except SessionCreationError as e:
            assert "Unsupported browser" in e.message
        else:
            raise AssertionError("create_session did not raise")


def test_chromedriver_output_discarded():
    from browser import driver_factory

    with (
        patch.object(driver_factory, "ChromeService") as service,
        patch.object(driver_factory.webdriver, "Chrome") as chrome,
    ):
        driver_factory._start_chrome(make_selenium_config(chrome_driver_path=Path("/opt/chromedriver")))
    service.assert_called_once_with(log_output=subprocess.DEVNULL, executable_path="/opt/chromedriver")
    assert chrome.call_args.kwargs["service"] is service.return_value


def test_chrome_options_follow_config():
    config = make_selenium_config(
        headless_mode=True, ignore_tls_errors=True, extra_arguments=["--lang=tr-TR"], window_width=1366, window_height=768
    )
    arguments = build_chrome_options(config).arguments
    assert "--headless=new" in arguments
    assert "--window-size=1366,768" in arguments
    assert "--ignore-certificate-errors" in arguments
    assert "--no-sandbox" in arguments
    assert arguments[-1] == "--lang=tr-TR"

    headed = build_chrome_options(make_selenium_config(headless_mode=False)).arguments
    assert "--headless=new" not in headed


def test_firefox_options_follow_config():
    arguments = build_firefox_options(make_selenium_config(browser="firefox", headless_mode=True)).arguments
    assert "-headless" in arguments
    assert "--width=1920" in arguments


def test_mark_dead():
    with patch.dict(DRIVER_STARTERS, {"chrome": _starter_returning(FakeDriver())}):
        session = create_session(make_selenium_config())
    session.mark_dead("test")
    session.mark_dead("again")
    assert not session.live
    assert "dead" in repr(session)


def driver_factory_module_tests() -> bool:
    """Run tests for browser session creation."""
    with suppress_logging():
        suite = TestSuite("Driver Factory", "browser.driver_factory")
        suite.start_suite()

        suite.run_test(
            "Headless chrome session",
            test_headless_session_is_live,
            test_summary="A headless 1920x1080 config yields a live session",
            functions_tested="create_session",
            expected_outcome="Live session with timeouts applied and no exception",
        )
        suite.run_test("Headed window size", test_headed_session_sets_window_size)
        suite.run_test("Config is copied", test_session_keeps_its_own_config_copy)
        suite.run_test(
            "Start failure",
            test_start_failure_raises_session_creation_error,
            expected_outcome="SessionCreationError with the driver error chained",
        )
        suite.run_test(
            "Unexpected start error",
            test_unexpected_start_error_is_wrapped,
            expected_outcome="Any starter exception surfaces as SessionCreationError",
        )
        suite.run_test(
            "Partial start cleanup",
            test_partially_started_driver_is_quit,
            expected_outcome="A driver that started but could not be configured is quit",
        )
        suite.run_test("Unsupported browser", test_unsupported_browser_raises)
        suite.run_test("Chrome options", test_chrome_options_follow_config, functions_tested="build_chrome_options")
        suite.run_test(
            "Chromedriver output",
            test_chromedriver_output_discarded,
            expected_outcome="The chromedriver service logs to DEVNULL",
        )
        suite.run_test("Firefox options", test_firefox_options_follow_config, functions_tested="build_firefox_options")
        suite.run_test("mark_dead", test_mark_dead)

        return suite.finish_suite()


run_comprehensive_tests = create_standard_test_runner(driver_factory_module_tests)


if __name__ == "__main__":
    success = run_comprehensive_tests()
    sys.exit(0 if success else 1)
