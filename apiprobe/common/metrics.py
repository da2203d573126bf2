"""Prometheus metric definitions for the dispatcher."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


dispatch_requests_total = Counter(
    "dispatch_requests_total",
    "Total dispatched actions",
    ["service", "action"],
)
dispatch_failures_total = Counter(
    "dispatch_failures_total",
    "Dispatches that did not end in an upstream 2xx",
    ["service", "action", "kind"],
)
upstream_latency_seconds = Histogram(
    "upstream_latency_seconds",
    "Upstream call latency seconds",
    ["service", "stage"],
)
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
