"""Prometheus metrics for the golden signals of the search service."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


REQUEST_LATENCY = Histogram(
    "emoji_search_request_latency_seconds",
    "HTTP request latency in seconds",
    ["route"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

REQUEST_COUNT = Counter(
    "emoji_search_requests_total",
    "Total HTTP requests",
    ["route", "status"],
)

DOCUMENTS_INSERTED = Counter(
    "emoji_search_documents_inserted_total",
    "Documents accepted into the index",
)

SEARCH_COUNT = Counter(
    "emoji_search_searches_total",
    "Search requests by query kind",
    ["kind"],
)

SEARCH_LATENCY = Histogram(
    "emoji_search_search_latency_seconds",
    "Search latency (scoring, geofence and result policy)",
    ["kind"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
)

SEARCH_RESULTS = Histogram(
    "emoji_search_results_returned",
    "Number of results returned per search",
    buckets=(0, 1, 5, 10, 25, 50, 100, 250),
)

PERSISTENCE_FAILURES = Counter(
    "emoji_search_persistence_failures_total",
    "Snapshot writes that failed after a document was indexed",
)

INDEX_DOC_COUNT = Gauge(
    "emoji_search_index_document_count",
    "Documents in the relevance index",
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    target = histogram.labels(**labels) if labels else histogram
    try:
        yield
    finally:
        target.observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get content type for metrics endpoint."""
    return CONTENT_TYPE_LATEST
