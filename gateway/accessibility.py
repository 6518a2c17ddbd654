#!/usr/bin/env python3

"""
Basic WCAG checks for gateway pages.

Covers the three checks the payment pages are held to: images need alt
text, form inputs need a label, and the document needs a valid ``lang``.
Every lookup goes through ``SafeOperations``, so a lost session is
recovered once and a failed lookup comes back as a failed result.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Optional

from browser.safe_operations import SafeOperations
from browser.selenium_utils import FallbackLocator
from core.operation_result import OperationResult

logger = logging.getLogger(__name__)

LANG_PATTERN = re.compile(r"^[a-z]{2,3}(-[A-Z]{2})?(-[a-z]{4})?(-[A-Z]{2})?$")
UNLABELLED_INPUT_TYPES = frozenset({"hidden", "submit", "button"})

IMAGES = FallbackLocator.css("images", "img")
INPUTS = FallbackLocator.css("inputs", "input")
HTML_ROOT = FallbackLocator.css("html root", "html")


@dataclass(frozen=True)
class AccessibilityIssue:
    rule: str
    message: str


@dataclass
class AccessibilityReport:
    """Issues found on one page."""

    issues: list[AccessibilityIssue] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.issues

    def messages(self, rule: Optional[str] = None) -> list[str]:
        return [i.message for i in self.issues if rule is None or i.rule == rule]


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _forward(result: OperationResult) -> OperationResult:
    """Re-type a failed lookup as the failure of the calling check."""
    return replace(result, value=None)


class AccessibilityChecker:
    """Run the page checks against the worker's current page."""

    def __init__(self, ops: SafeOperations) -> None:
        self.ops = ops

    def check_images(self) -> OperationResult[list[AccessibilityIssue]]:
        found = self.ops.safe_find_all(IMAGES)
        if not found.success:
            return _forward(found)
        issues = [
            AccessibilityIssue("image-alt", f"Image without alt text: {image.get_attribute('src') or ''}")
            for image in found.value or []
            if _blank(image.get_attribute("alt"))
        ]
        return OperationResult.ok(issues)

    def _has_label(self, element_id: Optional[str]) -> OperationResult[bool]:
        if _blank(element_id):
            return OperationResult.ok(False)
        labels = self.ops.safe_find_all(FallbackLocator.css(f"label for {element_id}", f"label[for='{element_id}']"))
        if not labels.success:
            return _forward(labels)
        return OperationResult.ok(bool(labels.value))

    def check_inputs(self) -> OperationResult[list[AccessibilityIssue]]:
        found = self.ops.safe_find_all(INPUTS)
        if not found.success:
            return _forward(found)
        issues: list[AccessibilityIssue] = []
        for element in found.value or []:
            if (element.get_attribute("type") or "").lower() in UNLABELLED_INPUT_TYPES:
                continue
            if not _blank(element.get_attribute("aria-label")) or not _blank(element.get_attribute("aria-labelledby")):
                continue
            labelled = self._has_label(element.get_attribute("id"))
            if not labelled.success:
                return _forward(labelled)
            if not labelled.value:
                name = element.get_attribute("name") or ""
                issues.append(AccessibilityIssue("input-label", f"Input without label: {name}"))
        return OperationResult.ok(issues)

    def check_language(self) -> OperationResult[list[AccessibilityIssue]]:
        found = self.ops.safe_find_all(HTML_ROOT)
        if not found.success:
            return _forward(found)
        root = (found.value or [None])[0]
        lang = root.get_attribute("lang") if root is not None else None
        if _blank(lang):
            return OperationResult.ok([AccessibilityIssue("html-lang", "Missing lang attribute on html element")])
        if not LANG_PATTERN.match(lang.strip()):
            return OperationResult.ok([AccessibilityIssue("html-lang", f"Invalid language code: {lang}")])
        return OperationResult.ok([])

    def audit(self) -> OperationResult[AccessibilityReport]:
        """Run every check; the first failed lookup fails the audit."""
        report = AccessibilityReport()
        for check in (self.check_images, self.check_inputs, self.check_language):
            result = check()
            if not result.success:
                logger.warning(f"Accessibility audit stopped: {result.message}")
                return _forward(result)
            report.issues.extend(result.value or [])
        if report.issues:
            logger.info(f"Accessibility audit found {len(report.issues)} issue(s)")
        return OperationResult.ok(report)


__all__ = ["AccessibilityChecker", "AccessibilityIssue", "AccessibilityReport"]
