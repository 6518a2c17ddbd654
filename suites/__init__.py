"""Live Suites Package.

Opt-in smoke checks against the configured gateway target. They are only
run by ``run_all_tests.py --live`` (or directly as scripts) and skip
themselves when the target is not configured.
- smoke_suite: UI reachability, title, login and payment form fields
- api_suite: API reachability and JSON content type
"""

LIVE_SUITES: tuple[str, ...] = ("suites.smoke_suite", "suites.api_suite")
