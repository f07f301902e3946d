"""Prometheus instruments for state-changing escrow routes."""

from __future__ import annotations

import os
import time
from typing import Any, Callable

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    make_asgi_app,
    multiprocess,
)

ASGIApp = Callable[..., Any]

TRANSITION_DURATION_BUCKETS = (
    [round(0.5 * i, 1) for i in range(1, 21)]
    + [float(x) for x in range(15, 55, 5)]
    + [float("inf")]
)


class TransitionMetrics:
    """Request counter, latency histogram and in-progress gauge for one route."""

    def __init__(self, name: str, description: str) -> None:
        self.requests_total = Counter(
            f"{name}_requests_total",
            f"Total {description} requests processed",
            ["status"],
        )
        self.duration_milliseconds = Histogram(
            f"{name}_request_duration_milliseconds",
            f"Wall time to process a {description} request (ms)",
            ["status"],
            buckets=TRANSITION_DURATION_BUCKETS,
        )
        self.inprogress = Gauge(
            f"{name}_requests_inprogress",
            f"Number of {description} requests currently being processed",
            multiprocess_mode="livesum",
        )

    def observe(self, status: str, start_time: float) -> None:
        self.requests_total.labels(status=status).inc()
        elapsed = (time.perf_counter() - start_time) * 1000
        self.duration_milliseconds.labels(status=status).observe(elapsed)


pay_request_settlements = TransitionMetrics(
    "pay_request_settlements", "plain pay request settlement"
)
pay_request_sweeps = TransitionMetrics("pay_request_sweeps", "plain pay request sweep")
zk_pay_request_settlements = TransitionMetrics(
    "zk_pay_request_settlements", "private pay request settlement"
)
zk_pay_request_sweeps = TransitionMetrics(
    "zk_pay_request_sweeps", "private pay request sweep"
)


def metrics_asgi_app() -> ASGIApp:
    """ASGI app exposing metrics, aggregated across workers when configured."""
    if os.environ.get("PROMETHEUS_MULTIPROC_DIR"):
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        return make_asgi_app(registry=registry)
    return make_asgi_app()
