import sys
from pathlib import Path

# Add project root to Python path to allow running script directly
sys.path.append(str(Path(__file__).resolve().parent.parent))

from selenium.common.exceptions import TimeoutException, WebDriverException

from core.retry import RetryPolicy
from gateway.test_data import row
from reporting.result_sink import ResultSink
from reporting.test_result import TestStatus
from testing.test_framework import (
    Colors,
    MagicMock,
    TestSuite,
    get_selected_groups,
    has_ansi_codes,
    set_selected_groups,
    strip_ansi_codes,
    suppress_logging,
)
from testing.test_utilities import (
    FakeSessionFactory,
    create_standard_test_runner,
    make_browser_manager,
    temp_directory,
)


def _suite(sink: ResultSink, **kwargs) -> TestSuite:
    kwargs.setdefault("selected_groups", ())
    return TestSuite("Inner Suite", "tests.inner", sink=sink, **kwargs)


def _fail() -> None:
    raise AssertionError("total mismatch")


def _error() -> None:
    raise ValueError("unexpected payload")


def test_exactly_one_result_per_test():
    sink = ResultSink(Path("unused"))
    suite = _suite(sink)

    assert suite.run_test("passes", lambda: None)
    assert not suite.run_test("fails", _fail)
    assert not suite.run_test("errors", _error)

    assert [r.status for r in sink.results] == [TestStatus.PASSED, TestStatus.FAILED, TestStatus.ERROR]
    assert [r.error_kind for r in sink.results] == [None, "assertion", "other"]
    assert sink.results[1].message == "Assertion failed: total mismatch"
    assert "ValueError: unexpected payload" in sink.results[2].message
    assert suite.test_results == list(sink.results)
    assert (suite.tests_run, suite.tests_passed, suite.tests_failed) == (3, 1, 2)
    assert all(r.duration_ms >= 0 and r.started_at is not None for r in sink.results)
    assert all(r.timestamp >= r.started_at for r in sink.results)


def test_session_creation_failure_records_setup_error():
    sink = ResultSink(Path("unused"))
    manager, _ = make_browser_manager(FakeSessionFactory(fail_after=0))
    body = MagicMock()
    suite = _suite(sink, browser_manager=manager)

    assert not suite.run_test("needs browser", body)

    body.assert_not_called()
    assert len(sink) == 1
    result = sink.results[0]
    assert result.status is TestStatus.ERROR
    assert result.error_kind == "session_creation"
    assert result.message.startswith("Setup failed:")
    assert result.screenshot_path is None


def test_unexpected_setup_error_records_setup_error():
    sink = ResultSink(Path("unused"))
    factory = FakeSessionFactory(fail_after=0, error=RuntimeError("chromedriver exited"))
    manager, _ = make_browser_manager(factory)
    body = MagicMock()
    suite = _suite(sink, browser_manager=manager)

    assert not suite.run_test("needs browser", body)

    body.assert_not_called()
    assert len(sink) == 1
    result = sink.results[0]
    assert result.status is TestStatus.ERROR
    assert result.error_kind == "session_creation"
    assert result.message == "Setup failed: RuntimeError: chromedriver exited"


def test_session_checked_before_each_test():
    sink = ResultSink(Path("unused"))
    manager, factory = make_browser_manager()
    suite = _suite(sink, browser_manager=manager)

    assert suite.run_test("first", lambda: None)
    manager.session.driver.kill()
    assert suite.run_test("second", lambda: None)

    assert len(factory.created) == 2
    assert manager.recreations == 1


def test_transient_failure_retried_then_passes():
    sink = ResultSink(Path("unused"))
    calls = {"count": 0}

    def _flaky() -> None:
        calls["count"] += 1
        if calls["count"] == 1:
            raise TimeoutException("page load timed out")

    suite = _suite(sink, retry_policy=RetryPolicy(max_retries=2, delay_seconds=0))
    assert suite.run_test("flaky", _flaky)

    assert calls["count"] == 2
    assert len(sink) == 1
    assert sink.results[0].passed
    assert sink.results[0].attempts == 2


def test_retries_exhausted():
    sink = ResultSink(Path("unused"))
    body = MagicMock(side_effect=WebDriverException("chrome not reachable"))
    suite = _suite(sink, retry_policy=RetryPolicy(max_retries=2, delay_seconds=0))

    assert not suite.run_test("always lost", body)

    assert body.call_count == 3
    result = sink.results[0]
    assert result.status is TestStatus.ERROR
    assert result.error_kind == "session_lost"
    assert result.attempts == 3


def test_assertion_failures_not_retried():
    sink = ResultSink(Path("unused"))
    body = MagicMock(side_effect=AssertionError("timeout banner missing"))
    suite = _suite(sink, retry_policy=RetryPolicy(max_retries=3, delay_seconds=0))

    assert not suite.run_test("assertion", body)

    assert body.call_count == 1
    assert sink.results[0].attempts == 1


def test_group_selection():
    sink = ResultSink(Path("unused"))
    body = MagicMock()
    suite = _suite(sink, selected_groups=("smoke",))

    assert suite.run_test("api only", body, groups=("api",))
    assert suite.run_test("untagged", body)
    assert suite.run_test("smoke ui", body, groups=("Smoke", "ui"))

    assert body.call_count == 1
    assert [r.name for r in sink.results] == ["smoke ui"]
    assert sink.results[0].groups == ("smoke", "ui")
    assert suite.tests_deselected == 2


def test_untagged_tests_belong_to_unit_group():
    sink = ResultSink(Path("unused"))
    suite = _suite(sink, selected_groups=("unit",))
    assert suite.run_test("untagged", lambda: None)
    assert sink.results[0].groups == ("unit",)


def test_global_group_selection():
    previous = get_selected_groups()
    try:
        set_selected_groups(["API", " "])
        assert get_selected_groups() == frozenset({"api"})
        suite = TestSuite("Inner Suite", "tests.inner", sink=ResultSink(Path("unused")))
        assert suite.is_selected(("api",))
        assert not suite.is_selected(("unit",))

        set_selected_groups([])
        assert get_selected_groups() is None
    finally:
        set_selected_groups(previous)


def test_table_rows_are_isolated():
    sink = ResultSink(Path("unused"))
    shared: list[str] = []
    suite = _suite(sink)

    def _appends(items: list[str], value: str) -> None:
        items.append(value)
        assert items == [value]

    all_passed = suite.run_table(
        "append",
        _appends,
        [("first", {"items": shared, "value": "a"}), row("second", items=shared, value="b")],
        groups=("validation",),
    )

    assert all_passed
    assert shared == []
    assert [r.name for r in sink.results] == ["append[first]", "append[second]"]
    assert all(r.groups == ("validation",) for r in sink.results)


def test_table_failures_are_reported_per_row():
    sink = ResultSink(Path("unused"))
    suite = _suite(sink)

    def _positive(amount: int) -> None:
        assert amount > 0, f"{amount} is not positive"

    assert not suite.run_table("positive", _positive, [("one", {"amount": 1}), ("minus", {"amount": -1})])
    assert [r.passed for r in sink.results] == [True, False]


def test_screenshot_on_failure():
    with temp_directory() as tmp:
        sink = ResultSink(tmp)
        manager, _ = make_browser_manager()
        suite = _suite(sink, browser_manager=manager)

        suite.run_test("passes", lambda: None)
        suite.run_test("fails", _fail)

        passed, failed = sink.results
        assert passed.screenshot_path is None
        assert failed.screenshot_path is not None
        assert Path(failed.screenshot_path).exists()
        assert "_FAILED_" in Path(failed.screenshot_path).name


def test_screenshot_on_pass():
    with temp_directory() as tmp:
        sink = ResultSink(tmp)
        manager, _ = make_browser_manager()
        suite = _suite(sink, browser_manager=manager, screenshot_on_pass=True)
        suite.run_test("passes", lambda: None)
        assert "_PASSED_" in sink.results[0].screenshot_path


def test_screenshot_failure_still_records_result():
    with temp_directory() as tmp:
        sink = ResultSink(tmp)
        manager, _ = make_browser_manager()
        manager.ensure_session().driver.screenshot_error = WebDriverException("screenshot failed")
        suite = _suite(sink, browser_manager=manager)

        assert not suite.run_test("fails", _fail)

        assert len(sink) == 1
        assert sink.results[0].screenshot_path is None
        assert sink.results[0].status is TestStatus.FAILED


def test_finish_suite_writes_report():
    with temp_directory() as tmp:
        sink = ResultSink(tmp)
        suite = _suite(sink)
        suite.start_suite()
        suite.run_test("passes", lambda: None)
        suite.run_test("fails", _fail)
        suite.add_warning("target not configured")

        assert not suite.finish_suite(report_path=tmp / "report.html")

        html = (tmp / "report.html").read_text(encoding="utf-8")
        assert "Inner Suite" in html
        assert html.count("<details") == 2
        assert suite.warnings == 1


def test_color_helpers():
    colored = Colors.green("ok")
    assert has_ansi_codes(colored)
    assert strip_ansi_codes(colored) == "ok"
    assert not has_ansi_codes("plain")


def framework_module_tests() -> bool:
    """Run tests for the suite runner itself."""
    with suppress_logging():
        suite = TestSuite("Test Framework", "testing.test_framework")
        suite.start_suite()

        suite.run_test(
            "One result per test",
            test_exactly_one_result_per_test,
            expected_outcome="PASSED, FAILED and ERROR each recorded exactly once",
        )
        suite.run_test(
            "Session creation failure",
            test_session_creation_failure_records_setup_error,
            test_summary="No browser can be started before the test body",
            expected_outcome="One ERROR result tagged session_creation; the body never runs",
        )
        suite.run_test(
            "Unexpected setup error",
            test_unexpected_setup_error_records_setup_error,
            expected_outcome="Any exception from session setup is recorded as a setup ERROR",
        )
        suite.run_test("Session checked per test", test_session_checked_before_each_test)
        suite.run_test("Retry then pass", test_transient_failure_retried_then_passes)
        suite.run_test("Retries exhausted", test_retries_exhausted)
        suite.run_test("Assertions not retried", test_assertion_failures_not_retried)
        suite.run_test("Group selection", test_group_selection)
        suite.run_test("Unit group default", test_untagged_tests_belong_to_unit_group)
        suite.run_test("Global group selection", test_global_group_selection)
        suite.run_test(
            "Table row isolation",
            test_table_rows_are_isolated,
            expected_outcome="Each row receives its own copy of its parameters",
        )
        suite.run_test("Table failures per row", test_table_failures_are_reported_per_row)
        suite.run_test("Screenshot on failure", test_screenshot_on_failure)
        suite.run_test("Screenshot on pass", test_screenshot_on_pass)
        suite.run_test("Screenshot failure", test_screenshot_failure_still_records_result)
        suite.run_test("finish_suite report", test_finish_suite_writes_report)
        suite.run_test("Color helpers", test_color_helpers)

        return suite.finish_suite()


run_comprehensive_tests = create_standard_test_runner(framework_module_tests)


if __name__ == "__main__":
    success = run_comprehensive_tests()
    sys.exit(0 if success else 1)
