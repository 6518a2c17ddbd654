import sys
from pathlib import Path

# Add project root to Python path to allow running script directly
sys.path.append(str(Path(__file__).resolve().parent.parent))

import json
import re
import threading
from datetime import datetime, timedelta
from unittest.mock import patch

from selenium.common.exceptions import WebDriverException

from core.exceptions import ReportWriteError
from reporting.report_generator import format_duration, generate_report, group_breakdown, write_report
from reporting.result_sink import ResultSink, get_default_sink, reset_default_sink
from reporting.screenshots import capture_screenshot, sanitize_test_name, screenshot_filename
from reporting.test_result import TestResult, TestStatus
from testing.fake_driver import PNG_BYTES
from testing.test_framework import TestSuite, suppress_logging
from testing.test_utilities import create_standard_test_runner, make_session, temp_directory, temp_file

BASE_TIME = datetime(2026, 3, 14, 9, 30, 0)


def _result(name: str, passed: bool = True, offset: int = 0, **kwargs) -> TestResult:
    return TestResult(name=name, passed=passed, timestamp=BASE_TIME + timedelta(seconds=offset), **kwargs)


def _three_results() -> list[TestResult]:
    return [
        _result("login page loads", True, 0, duration_ms=420, groups=("smoke",)),
        _result("payment form fields", True, 1, duration_ms=1534, groups=("smoke", "ui")),
        _result("invalid card rejected", False, 2, message="Assertion failed: no error shown", groups=("ui",)),
    ]


# --- TestResult ---


def test_status_is_derived_from_passed():
    assert _result("a", True).status is TestStatus.PASSED
    assert _result("b", False).status is TestStatus.FAILED
    assert _result("c", False, status=TestStatus.ERROR).outcome == "ERROR"


def test_invalid_results_rejected():
    for kwargs in (
        {"name": "", "passed": True},
        {"name": "x", "passed": True, "duration_ms": -1},
        {"name": "x", "passed": True, "attempts": 0},
        {"name": "x", "passed": True, "status": TestStatus.FAILED},
        {"name": "x", "passed": False, "status": TestStatus.PASSED},
    ):
        try:
            TestResult(**kwargs)
        except ValueError:
            continue
        raise AssertionError(f"TestResult accepted {kwargs}")


def test_result_to_dict():
    data = _result("a", False, groups=["ui"], error_kind="timeout").to_dict()
    assert data["status"] == "FAILED"
    assert data["groups"] == ["ui"]
    assert data["timestamp"] == "2026-03-14T09:30:00.000"
    assert data["started_at"] is None
    assert data["error_kind"] == "timeout"


# --- Report ---


def test_report_summary_counts():
    sink = ResultSink(Path("unused"))
    for result in _three_results():
        sink.record_result(result)

    report = sink.generate_report("Gateway")

    assert (report.total, report.passed, report.failed) == (3, 2, 1)
    assert report.errors == 0
    assert report.pass_rate == 66.7
    assert report.summary["total"] == 3
    assert sink.totals() == {"total": 3, "passed": 2, "failed": 1, "errors": 0}


def test_report_renders_one_section_per_result_in_order():
    results = _three_results()
    report = generate_report(results, "Gateway")
    assert report.sections == tuple(r.name for r in results)
    assert report.html.count("<details") == 3
    positions = [report.html.index(f'id="result-{i}"') for i in (1, 2, 3)]
    assert positions == sorted(positions)
    assert 'class="failed" id="result-3"' in report.html


def test_report_is_deterministic():
    results = _three_results()
    first = generate_report(results, "Gateway")
    second = generate_report(list(results), "Gateway")
    assert first == second
    assert first.generated_at == "2026-03-14 09:30:02"


def test_empty_report():
    report = generate_report([], "Empty")
    assert report.total == 0
    assert report.pass_rate == 0.0
    assert report.sections == ()
    assert report.generated_at == "no results recorded"


def test_report_escapes_user_text():
    report = generate_report([_result("<script>alert(1)</script>", False, message='"quoted" & <b>')], "A & B")
    assert "<script>alert(1)" not in report.html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in report.html
    assert "&quot;quoted&quot; &amp; &lt;b&gt;" in report.html
    assert "<title>A &amp; B</title>" in report.html


def test_report_links_screenshots():
    report = generate_report([_result("shot", False, screenshot_path="results/screenshots/shot_FAILED.png")])
    assert '<img class="screenshot" src="results/screenshots/shot_FAILED.png"' in report.html
    no_shot = generate_report([_result("no shot", False)])
    assert "<img" not in no_shot.html


def test_format_duration():
    assert format_duration(0) == "0ms"
    assert format_duration(999) == "999ms"
    assert format_duration(1000) == "1.00s"
    assert format_duration(1534) == "1.53s"


def test_group_breakdown():
    breakdown = group_breakdown(_three_results() + [_result("untagged", True)])
    assert list(breakdown) == ["smoke", "ui", "ungrouped"]
    assert breakdown["smoke"] == (2, 0)
    assert breakdown["ui"] == (1, 1)
    assert breakdown["ungrouped"] == (1, 0)


def test_write_report_and_json():
    with temp_directory() as tmp:
        sink = ResultSink(tmp / "screenshots")
        for result in _three_results():
            sink.record_result(result)

        html_path = sink.write_report(tmp / "out" / "report.html", title="Gateway")
        json_path = sink.write_json(tmp / "out" / "results.json")

        assert html_path is not None and html_path.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")
        assert json_path is not None
        payload = json.loads(json_path.read_text(encoding="utf-8"))
        assert payload["summary"]["total"] == 3
        assert [r["name"] for r in payload["results"]] == [r.name for r in _three_results()]


def test_write_failure_returns_none():
    with temp_file(suffix=".txt") as blocker:
        # A regular file cannot be a parent directory
        assert write_report(generate_report(_three_results()), blocker / "report.html") is None
        assert ResultSink(Path("unused")).write_json(blocker / "results.json") is None


# --- Sink ---


def test_recording_same_result_twice_appends_twice():
    sink = ResultSink(Path("unused"))
    result = _result("duplicate")
    sink.record_result(result)
    sink.record_result(result)
    assert len(sink) == 2
    assert sink.results == (result, result)
    assert generate_report(sink.results).sections == ("duplicate", "duplicate")


def test_concurrent_recording():
    sink = ResultSink(Path("unused"))

    def _record(worker: int) -> None:
        for i in range(50):
            sink.record_result(_result(f"worker {worker} test {i}"))

    threads = [threading.Thread(target=_record, args=(w,)) for w in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert len(sink) == 200
    assert len({r.name for r in sink.results}) == 200


def test_results_snapshot_is_immutable_view():
    sink = ResultSink(Path("unused"))
    sink.record_result(_result("a"))
    snapshot = sink.results
    sink.record_result(_result("b"))
    assert len(snapshot) == 1
    sink.clear()
    assert len(sink) == 0


def test_default_sink_can_be_replaced():
    previous = get_default_sink()
    try:
        replacement = ResultSink(Path("unused"))
        assert reset_default_sink(replacement) is replacement
        assert get_default_sink() is replacement
    finally:
        reset_default_sink(previous)
    assert get_default_sink() is previous


# --- Screenshots ---


def test_sanitize_test_name():
    assert sanitize_test_name("Login [bad card]/x") == "Login_bad_card_x"
    assert sanitize_test_name("???") == "test"
    assert len(sanitize_test_name("a" * 200)) == 80


def test_screenshot_filename():
    when = datetime(2026, 1, 2, 3, 4, 5, 678000)
    assert screenshot_filename("pay flow", "failed", when) == "pay_flow_FAILED_20260102_030405_678.png"


def test_screenshot_written():
    with temp_directory() as tmp:
        path = ResultSink(tmp).capture_screenshot(make_session(), "payment page", "FAILED")
        assert path is not None
        assert path.parent == tmp
        assert re.fullmatch(r"payment_page_FAILED_\d{8}_\d{6}_\d{3}\.png", path.name)
        assert path.read_bytes() == PNG_BYTES


def test_screenshot_failure_returns_none():
    with temp_directory() as tmp:
        session = make_session()
        session.driver.screenshot_error = WebDriverException("unable to capture screenshot")
        assert capture_screenshot(session, tmp, "broken", "FAILED") is None
        assert list(tmp.iterdir()) == []

        dead = make_session()
        dead.mark_dead()
        assert capture_screenshot(dead, tmp, "dead", "FAILED") is None
        assert capture_screenshot(None, tmp, "none", "FAILED") is None


def test_failed_screenshot_result_still_reported():
    with temp_directory() as tmp:
        sink = ResultSink(tmp)
        with patch("reporting.screenshots.write_screenshot", side_effect=ReportWriteError("disk full")):
            screenshot = sink.capture_screenshot(make_session(), "card declined", "FAILED")
        assert screenshot is None

        sink.record_result(_result("card declined", False, screenshot_path=screenshot))
        assert len(sink) == 1
        assert sink.results[0].screenshot_path is None

        report = sink.generate_report()
        assert report.sections == ("card declined",)
        assert "card declined" in report.html
        assert "<img" not in report.html


def reporting_module_tests() -> bool:
    """Run tests for results, the result sink, screenshots and the HTML report."""
    with suppress_logging():
        suite = TestSuite("Reporting", "reporting")
        suite.start_suite()

        suite.run_test("Status derivation", test_status_is_derived_from_passed)
        suite.run_test("Result validation", test_invalid_results_rejected)
        suite.run_test("Result to_dict", test_result_to_dict)
        suite.run_test(
            "Summary counts",
            test_report_summary_counts,
            test_summary="Three results, two passed and one failed",
            functions_tested="ResultSink.generate_report",
            expected_outcome="total=3, passed=2, failed=1",
        )
        suite.run_test("One section per result", test_report_renders_one_section_per_result_in_order)
        suite.run_test(
            "Deterministic report",
            test_report_is_deterministic,
            expected_outcome="The same ordered results yield the same report",
        )
        suite.run_test("Empty report", test_empty_report)
        suite.run_test("HTML escaping", test_report_escapes_user_text)
        suite.run_test("Screenshot links", test_report_links_screenshots)
        suite.run_test("format_duration", test_format_duration)
        suite.run_test("Group breakdown", test_group_breakdown)
        suite.run_test("Write report and JSON", test_write_report_and_json)
        suite.run_test("Write failure", test_write_failure_returns_none)
        suite.run_test("Duplicate record", test_recording_same_result_twice_appends_twice)
        suite.run_test("Concurrent record", test_concurrent_recording)
        suite.run_test("Snapshots", test_results_snapshot_is_immutable_view)
        suite.run_test("Default sink", test_default_sink_can_be_replaced)
        suite.run_test("sanitize_test_name", test_sanitize_test_name)
        suite.run_test("screenshot_filename", test_screenshot_filename)
        suite.run_test("Screenshot written", test_screenshot_written)
        suite.run_test("Screenshot failure", test_screenshot_failure_returns_none)
        suite.run_test(
            "Failed screenshot still reported",
            test_failed_screenshot_result_still_reported,
            test_summary="A result whose screenshot could not be written is recorded and rendered",
            expected_outcome="screenshot_path is None and the entry appears in the report",
        )

        return suite.finish_suite()


run_comprehensive_tests = create_standard_test_runner(reporting_module_tests)


if __name__ == "__main__":
    success = run_comprehensive_tests()
    sys.exit(0 if success else 1)
