"""Per-request trace identifiers shared by logging and tracing."""

from __future__ import annotations

from contextvars import ContextVar
import secrets


_current_trace: ContextVar[dict[str, str] | None] = ContextVar("emoji_search_trace", default=None)


def new_trace_id() -> str:
    return secrets.token_hex(16)


def new_span_id() -> str:
    return secrets.token_hex(8)


def get_trace_context() -> dict[str, str]:
    """Return the ids bound to the current context, minting a trace on first use."""
    current = _current_trace.get()
    if not current or not current.get("trace_id"):
        current = {"trace_id": new_trace_id(), "span_id": new_span_id()}
        _current_trace.set(current)
    return current


def set_trace_context(trace_id: str, span_id: str, **extra: str) -> None:
    _current_trace.set({"trace_id": trace_id, "span_id": span_id, **extra})


def bind_span(span_id: str) -> None:
    """Point log lines at a new span within the current trace."""
    _current_trace.set({**get_trace_context(), "span_id": span_id})
