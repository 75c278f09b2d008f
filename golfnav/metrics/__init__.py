"""Prometheus collectors for the HTTP surface and the enrichment pipeline."""

from __future__ import annotations

import os
import time
from typing import Any, Awaitable, Callable, Mapping

from fastapi import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

ASGIApp = Callable[..., Awaitable[Any]]

REGISTRY = CollectorRegistry()

HTTP_REQUESTS = Counter(
    "golfnav_http_requests_total",
    "HTTP requests by route template",
    ["route", "method", "status"],
    registry=REGISTRY,
)
HTTP_LATENCY = Histogram(
    "golfnav_http_request_seconds",
    "HTTP request latency by route template (seconds)",
    ["route", "method"],
    registry=REGISTRY,
)

FIXES_ENRICHED = Counter(
    "location_fixes_enriched_total",
    "Location fixes enriched",
    ["position", "persisted"],
    registry=REGISTRY,
)
FIXES_REJECTED = Counter(
    "location_fixes_rejected_total",
    "Location fixes rejected before enrichment",
    ["reason"],
    registry=REGISTRY,
)
SHOT_EVENTS = Counter(
    "location_shot_events_total", "Shot events emitted", registry=REGISTRY
)
GEOMETRY_GAPS = Counter(
    "location_geometry_gaps_total",
    "Fixes enriched without usable course geometry",
    ["kind"],
    registry=REGISTRY,
)
PERSISTENCE_FAILURES = Counter(
    "location_persistence_failures_total",
    "Enriched locations that could not be written durably",
    registry=REGISTRY,
)
COURSE_CACHE_EVENTS = Counter(
    "course_geometry_cache_total",
    "Course geometry cache lookups",
    ["result"],
    registry=REGISTRY,
)
ENRICH_LATENCY = Histogram(
    "location_enrich_seconds",
    "Time spent enriching a single fix (seconds)",
    buckets=(0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 1.0),
    registry=REGISTRY,
)

BUILD_VERSION = os.getenv("BUILD_VERSION", "dev")
GIT_SHA = os.getenv("GIT_SHA", "unknown")


async def metrics_app() -> Response:
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


def route_template(path: str, path_params: Mapping[str, Any] | None) -> str:
    """Collapse ``/api/rounds/r-42/shots`` into ``/api/rounds/{round_id}/shots``.

    Round, course and hole ids would otherwise give every request its own
    label set.
    """

    if not path_params:
        return path
    by_value = {str(value): name for name, value in path_params.items()}
    segments = [
        "{%s}" % by_value[segment] if segment in by_value else segment
        for segment in path.split("/")
    ]
    return "/".join(segments)


class MetricsMiddleware:
    """ASGI middleware counting requests once routing has resolved path params."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: dict[str, Any], receive: ASGIApp, send: ASGIApp) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        observed = {"status": 500}
        started = time.perf_counter()

        async def send_wrapper(message: dict[str, Any]) -> None:
            if message.get("type") == "http.response.start":
                observed["status"] = int(message.get("status", 200))
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            route = route_template(scope.get("path", ""), scope.get("path_params"))
            method = scope.get("method", "GET")
            HTTP_LATENCY.labels(route=route, method=method).observe(
                time.perf_counter() - started
            )
            HTTP_REQUESTS.labels(
                route=route, method=method, status=str(observed["status"])
            ).inc()


__all__ = [
    "BUILD_VERSION",
    "COURSE_CACHE_EVENTS",
    "ENRICH_LATENCY",
    "FIXES_ENRICHED",
    "FIXES_REJECTED",
    "GEOMETRY_GAPS",
    "GIT_SHA",
    "HTTP_LATENCY",
    "HTTP_REQUESTS",
    "MetricsMiddleware",
    "PERSISTENCE_FAILURES",
    "REGISTRY",
    "SHOT_EVENTS",
    "metrics_app",
    "route_template",
]
