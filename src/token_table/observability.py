"""Prometheus metrics and observability helpers for the token table."""
from __future__ import annotations

import time
from contextlib import contextmanager

from prometheus_client import Counter, Gauge, Histogram

from .config import get_settings

_REFRESH_DURATION = Histogram(
    "token_table_refresh_duration_seconds",
    "Duration of a full snapshot refresh.",
    buckets=(0.1, 0.25, 0.5, 1, 2, 3, 5, 8, 13, 21),
)
_REFRESH_ERRORS = Counter(
    "token_table_refresh_errors_total",
    "Total number of failed snapshot refreshes.",
)
_RECORDS_LOADED = Gauge(
    "token_table_records_loaded",
    "Number of records in the latest snapshot.",
)
_VIEW_COMPUTE_LATENCY = Histogram(
    "token_table_view_compute_seconds",
    "Latency of filter+sort+format passes.",
    buckets=(0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)


def _enabled() -> bool:
    return get_settings().metrics_enabled


def record_refresh(duration: float, records: int, errors: int) -> None:
    if not _enabled():
        return
    _REFRESH_DURATION.observe(max(duration, 0.0))
    if errors:
        _REFRESH_ERRORS.inc(errors)
    else:
        _RECORDS_LOADED.set(records)


@contextmanager
def record_view_latency():
    if not _enabled():
        yield
        return
    start = time.perf_counter()
    try:
        yield
    finally:
        _VIEW_COMPUTE_LATENCY.observe(max(time.perf_counter() - start, 0.0))
