#!/usr/bin/env python3

"""
Response-time measurement for gateway pages and API endpoints.

``measure_api`` calls an endpoint repeatedly and summarizes the latencies;
``measure_page_load`` times one navigation through ``SafeOperations``
including the wait for the page to become ready.
"""

import logging
import statistics
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Any, Optional

from browser.safe_operations import SafeOperations
from core.exceptions import GatewayApiError, OperationTimeoutError, describe_exception
from core.operation_result import OperationResult
from gateway.api_client import ApiResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResponseTimeStats:
    """Latency summary in milliseconds; ``failures`` counts calls that raised."""

    count: int
    failures: int
    min_ms: float
    max_ms: float
    mean_ms: float
    median_ms: float
    p95_ms: float

    @classmethod
    def from_samples(cls, samples: Sequence[float], failures: int = 0) -> "ResponseTimeStats":
        if not samples:
            return cls(0, failures, 0.0, 0.0, 0.0, 0.0, 0.0)
        ordered = sorted(samples)
        p95 = statistics.quantiles(ordered, n=20, method="inclusive")[18] if len(ordered) > 1 else ordered[0]
        return cls(
            count=len(ordered),
            failures=failures,
            min_ms=ordered[0],
            max_ms=ordered[-1],
            mean_ms=statistics.mean(ordered),
            median_ms=statistics.median(ordered),
            p95_ms=p95,
        )

    @classmethod
    def from_responses(cls, responses: Iterable[ApiResponse]) -> "ResponseTimeStats":
        """Summarize the ``elapsed_ms`` the client recorded on each response."""
        return cls.from_samples([float(r.elapsed_ms) for r in responses])

    def within(self, budget_ms: float) -> bool:
        """True when every call succeeded and the 95th percentile is inside ``budget_ms``."""
        return self.count > 0 and self.failures == 0 and self.p95_ms <= budget_ms

    def __str__(self) -> str:
        return (
            f"{self.count} calls, {self.failures} failed: "
            f"min {self.min_ms:.0f}ms, median {self.median_ms:.0f}ms, p95 {self.p95_ms:.0f}ms, max {self.max_ms:.0f}ms"
        )


def measure_api(call: Callable[[], Any], iterations: int = 10) -> ResponseTimeStats:
    """
    Time ``call`` ``iterations`` times.

    Transport errors and timeouts are counted as failures and left out of
    the latency figures; anything else propagates.
    """
    if iterations < 1:
        raise ValueError("iterations must be at least 1")
    samples: list[float] = []
    failures = 0
    for _ in range(iterations):
        start = time.perf_counter()
        try:
            call()
        except (GatewayApiError, OperationTimeoutError) as e:
            failures += 1
            logger.debug(f"Timed call failed: {describe_exception(e)}")
            continue
        samples.append((time.perf_counter() - start) * 1000)
    stats = ResponseTimeStats.from_samples(samples, failures)
    logger.info(f"Response times: {stats}")
    return stats


def measure_page_load(ops: SafeOperations, url: str, timeout_ms: Optional[int] = None) -> OperationResult[float]:
    """Milliseconds from navigation start until the page reports ready."""
    start = time.perf_counter()
    opened = ops.open_page(url, timeout_ms)
    if not opened.success:
        return replace(opened, value=None)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.debug(f"Loaded {url} in {elapsed_ms:.0f}ms")
    return OperationResult.ok(elapsed_ms, attempts=opened.attempts)


__all__ = ["ResponseTimeStats", "measure_api", "measure_page_load"]
