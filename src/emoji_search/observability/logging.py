"""JSON log lines for the emoji search server.

Each record becomes one orjson-encoded object carrying the current trace and
span ids, so insert and search logs can be joined with their spans.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import sys
from typing import Any

import orjson

from emoji_search.observability.context import get_trace_context


_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}
_SENSITIVE_MARKERS = ("password", "secret", "token", "authorization", "api_key")
_MAX_FIELD_CHARS = 500


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in _SENSITIVE_MARKERS)


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."


def _encode_fallback(value: Any) -> Any:
    """orjson ``default`` hook for values it cannot encode natively."""
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    MAX_MESSAGE_LEN = 2000

    def format(self, record: logging.LogRecord) -> str:
        trace = get_trace_context()
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "component": record.name.rsplit(".", 1)[-1],
            "message": _clip(record.getMessage(), self.MAX_MESSAGE_LEN),
            "trace_id": trace.get("trace_id", ""),
            "span_id": trace.get("span_id", ""),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(self._extra_fields(record))
        return orjson.dumps(entry, default=_encode_fallback).decode("utf-8")

    @staticmethod
    def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        for key, value in vars(record).items():
            if key in _STANDARD_ATTRS or key.startswith("_"):
                continue
            if _is_sensitive(key):
                fields[key] = "[REDACTED]"
            elif isinstance(value, str):
                fields[key] = _clip(value, _MAX_FIELD_CHARS)
            else:
                fields[key] = value
        return fields


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    logger_levels: dict[str, str] | None = None,
) -> None:
    """Replace the root handlers with one stdout handler.

    ``logger_levels`` maps logger names to level names for per-module
    overrides. uvicorn's access log is held at WARNING; request metrics
    already cover it.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        JsonFormatter() if json_output else logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    for name, name_level in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(name_level.upper())
