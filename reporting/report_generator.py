#!/usr/bin/env python3

"""
Report Generator - renders the HTML report of a test run.

``generate_report`` is a pure function of its input sequence: the same
ordered TestResults always yield the same summary counts, the same section
order and the same HTML. The header timestamp comes from the results, not
from the clock. Nothing here touches a browser session.

Writing is separate (``write_report`` / ``write_json_results``) and never
raises: a failed write is logged as ``ReportWriteError`` and reported as
``None``.
"""

import html
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from core.exceptions import ReportWriteError, describe_exception
from reporting.test_result import TestResult, TestStatus

logger = logging.getLogger(__name__)

UNGROUPED = "ungrouped"

_STYLE = """
body { font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; margin: 0; background: #f5f6f8; color: #222; }
.container { max-width: 1100px; margin: 0 auto; padding: 24px; }
.header { background: #2c3e50; color: #fff; padding: 20px 24px; border-radius: 6px; }
.header h1 { margin: 0 0 6px 0; font-size: 24px; }
.subtitle { color: #cfd8dc; font-size: 13px; }
.section { background: #fff; margin-top: 20px; padding: 16px 24px; border-radius: 6px; }
.stats-grid { display: flex; gap: 12px; flex-wrap: wrap; }
.stat-card { flex: 1; min-width: 120px; text-align: center; padding: 12px; border: 1px solid #e0e0e0; border-radius: 6px; }
.stat-number { font-size: 26px; font-weight: bold; }
.stat-label { font-size: 12px; color: #666; }
.progress-bar { height: 10px; background: #f8d7da; border-radius: 5px; overflow: hidden; margin-top: 16px; }
.progress-fill { height: 100%; background: #28a745; }
table.groups { border-collapse: collapse; width: 100%; }
table.groups th, table.groups td { text-align: left; padding: 6px 10px; border-bottom: 1px solid #eee; }
details { border: 1px solid #e0e0e0; border-radius: 4px; margin: 8px 0; padding: 6px 12px; }
details.passed summary .status { color: #28a745; }
details.failed summary .status, details.error summary .status { color: #dc3545; }
summary { cursor: pointer; font-weight: 600; }
dl { display: grid; grid-template-columns: 140px 1fr; gap: 4px 12px; font-size: 13px; }
dt { color: #666; }
dd { margin: 0; white-space: pre-wrap; word-break: break-word; }
img.screenshot { max-width: 100%; border: 1px solid #ccc; margin-top: 8px; }
"""


@dataclass(frozen=True)
class ReportArtifact:
    """Rendered report plus the numbers it was built from."""

    title: str
    total: int
    passed: int
    failed: int
    errors: int
    pass_rate: float
    generated_at: str
    sections: tuple[str, ...]
    html: str

    @property
    def summary(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "errors": self.errors,
            "pass_rate": self.pass_rate,
        }


def format_duration(duration_ms: int) -> str:
    """``Nms`` below one second, ``N.NNs`` from one second up."""
    if duration_ms < 1000:
        return f"{duration_ms}ms"
    return f"{duration_ms / 1000:.2f}s"


def _esc(value: Any) -> str:
    return html.escape(str(value), quote=True)


def summarize(results: Sequence[TestResult]) -> dict[str, Any]:
    total = len(results)
    passed = sum(1 for r in results if r.passed)
    errors = sum(1 for r in results if r.status is TestStatus.ERROR)
    return {
        "total": total,
        "passed": passed,
        "failed": total - passed,
        "errors": errors,
        "pass_rate": round(passed / total * 100, 1) if total else 0.0,
        "duration_ms": sum(r.duration_ms for r in results),
    }


def group_breakdown(results: Sequence[TestResult]) -> dict[str, tuple[int, int]]:
    """Passed/failed counts per group, groups in first-seen order."""
    breakdown: dict[str, list[int]] = {}
    for result in results:
        for group in result.groups or (UNGROUPED,):
            counts = breakdown.setdefault(group, [0, 0])
            counts[0 if result.passed else 1] += 1
    return {group: (counts[0], counts[1]) for group, counts in breakdown.items()}


def _report_timestamp(results: Sequence[TestResult]) -> str:
    if not results:
        return "no results recorded"
    return max(r.timestamp for r in results).strftime("%Y-%m-%d %H:%M:%S")


def _render_summary(summary: dict[str, Any]) -> str:
    cards = [
        (summary["total"], "Total Tests", ""),
        (summary["passed"], "Passed", "color: #28a745;"),
        (summary["failed"], "Failed", "color: #dc3545;"),
        (summary["errors"], "Errors", "color: #ffc107;"),
        (f"{summary['pass_rate']:.1f}%", "Pass Rate", ""),
        (format_duration(summary["duration_ms"]), "Total Duration", ""),
    ]
    rendered = "".join(
        f'<div class="stat-card"><div class="stat-number" style="{style}">{_esc(value)}</div>'
        f'<div class="stat-label">{label}</div></div>'
        for value, label, style in cards
    )
    return (
        '<div class="section" id="summary"><h2>Summary</h2>'
        f'<div class="stats-grid">{rendered}</div>'
        f'<div class="progress-bar"><div class="progress-fill" style="width: {summary["pass_rate"]:.1f}%;"></div></div>'
        "</div>"
    )


def _render_groups(breakdown: dict[str, tuple[int, int]]) -> str:
    rows = "".join(
        f"<tr><td>{_esc(group)}</td><td>{passed}</td><td>{failed}</td></tr>"
        for group, (passed, failed) in breakdown.items()
    )
    return (
        '<div class="section" id="groups"><h2>Groups</h2>'
        '<table class="groups"><tr><th>Group</th><th>Passed</th><th>Failed</th></tr>'
        f"{rows}</table></div>"
    )


def _render_result(index: int, result: TestResult) -> str:
    status = result.outcome
    fields = [
        ("Status", status),
        ("Duration", format_duration(result.duration_ms)),
        ("Timestamp", result.timestamp.isoformat(sep=" ", timespec="milliseconds")),
    ]
    if result.started_at is not None:
        fields.append(("Started", result.started_at.isoformat(sep=" ", timespec="milliseconds")))
    if result.groups:
        fields.append(("Groups", ", ".join(result.groups)))
    if result.error_kind:
        fields.append(("Error kind", result.error_kind))
    if result.attempts > 1:
        fields.append(("Attempts", str(result.attempts)))
    fields.append(("Message", result.message or "-"))
    body = "".join(f"<dt>{label}</dt><dd>{_esc(value)}</dd>" for label, value in fields)

    screenshot = ""
    if result.screenshot_path:
        src = _esc(Path(result.screenshot_path).as_posix())
        screenshot = f'<a href="{src}"><img class="screenshot" src="{src}" alt="screenshot"></a>'

    return (
        f'<details class="{status.lower()}" id="result-{index}">'
        f'<summary><span class="status">[{status}]</span> {_esc(result.name)}'
        f" <small>({format_duration(result.duration_ms)})</small></summary>"
        f"<dl>{body}</dl>{screenshot}</details>"
    )


def generate_report(results: Sequence[TestResult], title: str = "Test Report") -> ReportArtifact:
    """
    Build the report for ``results`` in their given order.

    Every result gets exactly one collapsible section, including results
    whose screenshot is missing.
    """
    ordered = tuple(results)
    summary = summarize(ordered)
    generated_at = _report_timestamp(ordered)
    sections = tuple(r.name for r in ordered)

    details = "".join(_render_result(i, r) for i, r in enumerate(ordered, start=1))
    document = (
        '<!DOCTYPE html>\n<html lang="en">\n<head>\n<meta charset="UTF-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"<title>{_esc(title)}</title>\n<style>{_STYLE}</style>\n</head>\n<body>\n"
        '<div class="container">'
        f'<div class="header"><h1>{_esc(title)}</h1>'
        f'<div class="subtitle">Results as of {_esc(generated_at)}</div></div>'
        f"{_render_summary(summary)}"
        f"{_render_groups(group_breakdown(ordered))}"
        f'<div class="section" id="results"><h2>Results</h2>{details}</div>'
        "</div>\n</body>\n</html>\n"
    )
    return ReportArtifact(
        title=title,
        total=summary["total"],
        passed=summary["passed"],
        failed=summary["failed"],
        errors=summary["errors"],
        pass_rate=summary["pass_rate"],
        generated_at=generated_at,
        sections=sections,
        html=document,
    )


def _write_text(path: Path, text: str, what: str) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise ReportWriteError(f"Could not write {what}: {describe_exception(e)}", path=str(path)) from e
    return path


def write_report(artifact: ReportArtifact, path: Path) -> Optional[Path]:
    """Write the HTML report. Returns the path, or None when writing failed."""
    target = Path(path)
    try:
        _write_text(target, artifact.html, "HTML report")
    except ReportWriteError as e:
        logger.error(f"{e.message} ({e.path})")
        return None
    logger.info(f"HTML report written: {target} ({artifact.passed}/{artifact.total} passed)")
    return target


def write_json_results(results: Sequence[TestResult], path: Path) -> Optional[Path]:
    """Write every result plus the summary as JSON. Same failure policy as ``write_report``."""
    ordered = tuple(results)
    payload = {"summary": summarize(ordered), "results": [r.to_dict() for r in ordered]}
    target = Path(path)
    try:
        _write_text(target, json.dumps(payload, indent=2, ensure_ascii=False), "JSON results")
    except ReportWriteError as e:
        logger.error(f"{e.message} ({e.path})")
        return None
    logger.debug(f"JSON results written: {target}")
    return target


__all__ = [
    "ReportArtifact",
    "format_duration",
    "generate_report",
    "group_breakdown",
    "summarize",
    "write_json_results",
    "write_report",
]
