"""Prometheus metrics definitions for the freezer inventory."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "freezer_http_requests_total",
    "Total number of HTTP requests processed by the freezer API",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "freezer_http_request_duration_seconds",
    "Latency of HTTP requests processed by the freezer API",
    ["method", "path"],
)

ITEMS_TAKEN_OUT = Counter(
    "freezer_items_taken_out_total",
    "Number of inventory items marked as taken out",
    ["source"],
)

TAKEOUT_FAILURES = Counter(
    "freezer_takeout_failures_total",
    "Rejected take-out requests by error code",
    ["code"],
)

__all__ = [
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "ITEMS_TAKEN_OUT",
    "TAKEOUT_FAILURES",
]
