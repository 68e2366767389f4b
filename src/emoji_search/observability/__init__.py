"""Observability: structured logging, Prometheus metrics and OpenTelemetry tracing."""

from emoji_search.observability.context import get_trace_context, set_trace_context
from emoji_search.observability.logging import JsonFormatter, configure_logging
from emoji_search.observability.metrics import (
    DOCUMENTS_INSERTED,
    INDEX_DOC_COUNT,
    PERSISTENCE_FAILURES,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    SEARCH_COUNT,
    SEARCH_LATENCY,
    SEARCH_RESULTS,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from emoji_search.observability.tracing import TraceContextMiddleware, create_span, get_tracer, init_tracing


__all__ = [
    "DOCUMENTS_INSERTED",
    "INDEX_DOC_COUNT",
    "PERSISTENCE_FAILURES",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "SEARCH_COUNT",
    "SEARCH_LATENCY",
    "SEARCH_RESULTS",
    "JsonFormatter",
    "TraceContextMiddleware",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "track_latency",
]
