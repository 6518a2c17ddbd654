#!/usr/bin/env python3

"""API smoke suite: the configured API base answers and speaks JSON."""

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parent.parent))

from config import get_config_manager
from core.retry import RetryPolicy
from gateway.api_client import GatewayApiClient
from testing.test_framework import TestSuite
from testing.test_utilities import create_standard_test_runner

GROUPS = ("smoke", "api")


def api_suite_tests() -> bool:
    config = get_config_manager().get_config()
    target = config.target
    suite = TestSuite("Gateway API Smoke", __name__, retry_policy=RetryPolicy.from_config(config.run))
    suite.start_suite()

    if not target.api_configured:
        suite.add_warning("GATEWAY_API_BASE_URL is not set; API smoke suite skipped")
        return suite.finish_suite()

    with GatewayApiClient.from_config(target) as client:

        def test_api_reachable() -> None:
            response = client.get("")
            assert response.status_code < 500, f"API base answered {response.status_code}"

        def test_api_returns_json() -> None:
            response = client.get("")
            assert "application/json" in response.content_type.lower(), (
                f"Expected a JSON content type, got '{response.content_type or 'none'}'"
            )

        suite.run_test(
            "API base reachable",
            test_api_reachable,
            test_summary=f"GET {target.api_base_url}",
            functions_tested="GatewayApiClient.get",
            expected_outcome="Any status below 500",
            groups=GROUPS,
        )
        suite.run_test(
            "API answers with JSON",
            test_api_returns_json,
            test_summary="Check the Content-Type of the API base response",
            functions_tested="ApiResponse.content_type",
            expected_outcome="Content-Type contains application/json",
            groups=GROUPS,
        )

    return suite.finish_suite()


run_suite = create_standard_test_runner(api_suite_tests)


if __name__ == "__main__":
    sys.exit(0 if run_suite() else 1)
