"""OpenTelemetry spans for inserts and searches, plus request trace-id propagation."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Span, SpanKind, Tracer
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from emoji_search.observability.context import bind_span, new_span_id, new_trace_id, set_trace_context


logger = logging.getLogger(__name__)

TRACE_HEADER = "x-trace-id"
_TRACER_NAME = "emoji_search"
_state: dict[str, Tracer | None] = {"tracer": None}


def init_tracing(service_name: str = "emoji-search-server", otlp_endpoint: str = "") -> TracerProvider:
    """Install a global tracer provider; spans leave the process only when ``otlp_endpoint`` is set."""
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
        logger.info("Exporting spans to %s", otlp_endpoint)
    trace.set_tracer_provider(provider)
    _state["tracer"] = provider.get_tracer(_TRACER_NAME)
    return provider


def get_tracer() -> Tracer:
    tracer = _state["tracer"]
    if tracer is None:
        tracer = _state["tracer"] = trace.get_tracer(_TRACER_NAME)
    return tracer


@contextmanager
def create_span(
    name: str,
    attributes: dict[str, Any] | None = None,
    kind: SpanKind = SpanKind.INTERNAL,
) -> Iterator[Span]:
    """Run the block inside a span; exceptions mark the span as failed and propagate."""
    with get_tracer().start_as_current_span(name, kind=kind, attributes=attributes) as span:
        span_context = span.get_span_context()
        if span_context.is_valid:
            bind_span(format(span_context.span_id, "016x"))
        yield span


class TraceContextMiddleware:
    """Bind a trace id to each HTTP request and echo it in the response headers.

    The id comes from the ``x-trace-id`` request header when present.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        trace_id = Headers(scope=scope).get(TRACE_HEADER) or new_trace_id()
        set_trace_context(trace_id, new_span_id(), path=scope["path"])

        async def send_with_trace_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message).append(TRACE_HEADER, trace_id)
            await send(message)

        await self.app(scope, receive, send_with_trace_id)
