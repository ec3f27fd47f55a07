"""
Lightweight metrics collection for the prediction reconciler.
Wraps prometheus_client; counters never feed back into engine output.
"""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import Counter, Histogram, start_http_server

from shared.config import get_settings
from shared.utils.logging import get_logger

logger = get_logger(__name__)

# ── Counters ────────────────────────────────────────────────────────────
RECONCILE_RUNS = Counter(
    "pr_reconcile_runs_total",
    "Total reconciliation runs",
    ["outcome"],
)
MATCH_TIER_HITS = Counter(
    "pr_match_tier_hits_total",
    "Fixtures matched to a prediction, by matching tier",
    ["tier"],
)
UNMATCHED_FIXTURES = Counter(
    "pr_unmatched_fixtures_total",
    "Fixtures for which no prediction was found",
)
VALIDATION_ISSUES = Counter(
    "pr_validation_issues_total",
    "Diagnostics produced by the validator",
    ["kind"],
)

# ── Histograms ──────────────────────────────────────────────────────────
RECONCILE_LATENCY = Histogram(
    "pr_reconcile_seconds",
    "Time to run a full reconciliation",
    ["stage"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Iterator[None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        histogram.labels(**labels).observe(elapsed)


def start_metrics_server(port: int | None = None) -> None:
    """Start the Prometheus metrics HTTP server."""
    settings = get_settings()
    if not settings.metrics_enabled:
        return
    metrics_port = port or settings.metrics_port
    try:
        start_http_server(metrics_port)
        logger.info("metrics_server_started", port=metrics_port)
    except OSError as exc:
        logger.warning("metrics_server_failed", error=str(exc), port=metrics_port)
