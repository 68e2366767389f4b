"""Emoji search HTTP server.

Routes:
- POST /documents         index an emoji sequence with optional metadata
- GET  /search/{query}    rank documents; options arrive as camelCase query params
- GET  /health            liveness and index statistics
- GET  /metrics           Prometheus exposition
"""

from __future__ import annotations

import logging
from typing import Any

from anyio import to_thread
import orjson
from starlette.applications import Starlette
from starlette.datastructures import MutableHeaders
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from emoji_search.config import Settings
from emoji_search.errors import PersistenceError, ValidationError
from emoji_search.observability.logging import configure_logging
from emoji_search.observability.metrics import (
    REQUEST_COUNT,
    REQUEST_LATENCY,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from emoji_search.observability.tracing import TraceContextMiddleware, init_tracing
from emoji_search.service_layer.search_service import SearchService


logger = logging.getLogger(__name__)

_DOCUMENTS_ROUTE = "/documents"
_SEARCH_ROUTE = "/search/{query}"


# Hardening headers added to every HTTP response unless the endpoint set them
SECURITY_HEADERS = {
    "x-content-type-options": "nosniff",
    "x-frame-options": "SAMEORIGIN",
    "x-dns-prefetch-control": "off",
    "x-download-options": "noopen",
    "x-permitted-cross-domain-policies": "none",
    "x-xss-protection": "0",
    "referrer-policy": "no-referrer",
    "strict-transport-security": "max-age=15552000; includeSubDomains",
    "cross-origin-opener-policy": "same-origin",
    "cross-origin-resource-policy": "same-origin",
}


class SecurityHeadersMiddleware:
    """Pure-ASGI middleware that adds ``SECURITY_HEADERS`` to HTTP responses."""

    def __init__(self, app: ASGIApp, headers: dict[str, str] | None = None) -> None:
        self.app = app
        self.headers = SECURITY_HEADERS if headers is None else headers

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                response_headers = MutableHeaders(scope=message)
                for name, value in self.headers.items():
                    response_headers.setdefault(name, value)
            await send(message)

        await self.app(scope, receive, send_with_headers)


def _error_response(exc: ValidationError, route: str) -> JSONResponse:
    REQUEST_COUNT.labels(route=route, status="400").inc()
    return JSONResponse(exc.to_dict(), status_code=400)


def parse_search_params(params: dict[str, str]) -> dict[str, Any]:
    """Turn raw query parameters into a mapping ``SearchOptions`` can validate.

    ``geofence`` is the only structured option and arrives JSON-encoded; the
    remaining values are left as strings for pydantic's lax coercion.

    Raises:
        ValidationError: ``geofence`` is not valid JSON.
    """
    payload: dict[str, Any] = dict(params)
    raw_geofence = payload.pop("geofence", None)
    if raw_geofence:
        try:
            payload["geofence"] = orjson.loads(raw_geofence)
        except orjson.JSONDecodeError as exc:
            raise ValidationError(
                "geofence must be a JSON object",
                details=[{"loc": ["geofence"], "msg": str(exc), "type": "json_invalid"}],
            ) from exc
    return payload


def _build_documents_endpoint(service: SearchService):
    async def documents_endpoint(request: Request) -> JSONResponse:
        with track_latency(REQUEST_LATENCY, route=_DOCUMENTS_ROUTE):
            try:
                body = orjson.loads(await request.body())
            except orjson.JSONDecodeError as exc:
                return _error_response(
                    ValidationError(
                        "Request body must be JSON",
                        details=[{"loc": ["body"], "msg": str(exc), "type": "json_invalid"}],
                    ),
                    _DOCUMENTS_ROUTE,
                )
            if not isinstance(body, dict):
                return _error_response(
                    ValidationError(
                        "Request body must be a JSON object",
                        details=[{"loc": ["body"], "msg": "must be an object", "type": "type_error"}],
                    ),
                    _DOCUMENTS_ROUTE,
                )

            try:
                doc_id = await to_thread.run_sync(service.submit_document, body.get("emoji"), body.get("meta"))
            except ValidationError as exc:
                logger.info("Rejected document: %s", exc)
                return _error_response(exc, _DOCUMENTS_ROUTE)
            except PersistenceError as exc:
                logger.error("Snapshot write failed for document %s: %s", exc.doc_id, exc)
                REQUEST_COUNT.labels(route=_DOCUMENTS_ROUTE, status="500").inc()
                return JSONResponse({"error": str(exc), "id": exc.doc_id}, status_code=500)

        REQUEST_COUNT.labels(route=_DOCUMENTS_ROUTE, status="201").inc()
        return JSONResponse({"id": doc_id}, status_code=201)

    return documents_endpoint


def _build_search_endpoint(service: SearchService):
    async def search_endpoint(request: Request) -> JSONResponse:
        query = request.path_params["query"]
        with track_latency(REQUEST_LATENCY, route=_SEARCH_ROUTE):
            try:
                options = parse_search_params(dict(request.query_params))
                results = await to_thread.run_sync(service.run_search, query, options)
            except ValidationError as exc:
                return _error_response(exc, _SEARCH_ROUTE)

        REQUEST_COUNT.labels(route=_SEARCH_ROUTE, status="200").inc()
        return JSONResponse([entry.to_dict() for entry in results])

    return search_endpoint


def _build_health_endpoint(service: SearchService):
    async def health_endpoint(_: Request) -> JSONResponse:
        return JSONResponse({"status": "healthy", **service.stats()})

    return health_endpoint


async def metrics_endpoint(_: Request) -> Response:
    return Response(get_metrics(), media_type=get_metrics_content_type())


def create_app(settings: Settings | None = None, service: SearchService | None = None) -> Starlette:
    """Build the Starlette application.

    The snapshot is loaded once here; pass ``service`` to reuse an existing
    store (tests do this to share an in-memory index).

    Raises:
        PersistenceError: the configured snapshot exists but cannot be loaded.
    """
    settings = settings or Settings()
    service = service or SearchService.from_settings(settings)

    routes = [
        Route(_DOCUMENTS_ROUTE, endpoint=_build_documents_endpoint(service), methods=["POST"]),
        Route(_SEARCH_ROUTE, endpoint=_build_search_endpoint(service), methods=["GET"]),
        Route("/health", endpoint=_build_health_endpoint(service), methods=["GET"]),
        Route("/metrics", endpoint=metrics_endpoint, methods=["GET"]),
    ]
    middleware = [
        Middleware(TraceContextMiddleware),
        Middleware(SecurityHeadersMiddleware),
        Middleware(
            CORSMiddleware,
            allow_origins=settings.get_cors_allow_origins(),
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        ),
        Middleware(GZipMiddleware, minimum_size=settings.gzip_minimum_size),
    ]

    app = Starlette(debug=settings.log_level.lower() == "debug", routes=routes, middleware=middleware)
    app.state.search_service = service
    logger.info("Emoji search initialized with %d documents", len(service.store))
    return app


def main() -> None:
    """Main entry point for the emoji search server."""
    import uvicorn

    settings = Settings()
    configure_logging(level=settings.log_level, json_output=settings.log_json)
    init_tracing(service_name=settings.service_name, otlp_endpoint=settings.otlp_endpoint)

    try:
        app = create_app(settings)
    except PersistenceError as exc:
        logger.error("Cannot start: %s", exc)
        raise SystemExit(1) from exc

    logger.info("Starting server on %s:%d", settings.host, settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,  # Don't let uvicorn override our logging config
    )


if __name__ == "__main__":
    main()
