"""HTTP entrypoint for the dispatcher.

The console posts one action per request; the service authenticates against
the upstream payments API, runs the call and returns the full trace.
"""

from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse

from apiprobe.common.actions import action_groups
from apiprobe.common.config import settings
from apiprobe.common.logging import configure_logging, logger, trace_id_ctx
from apiprobe.common.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    metrics_response,
)
from apiprobe.common.startup import log_startup_config
from apiprobe.common.tracing import instrument_app, setup_tracing
from apiprobe.services.dispatcher.schemas import ApiResult
from apiprobe.services.dispatcher.service import DispatcherService

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings.service_name,
    [
        "service_name",
        "log_level",
        "live_base_url",
        "sandbox_base_url",
        "http_timeout_seconds",
        "tracing_enabled",
    ],
)
service = DispatcherService()
app = FastAPI(title="apiprobe Dispatcher")
instrument_app(app)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Record request count and latency for every HTTP call."""

    start = perf_counter()
    route = request.url.path
    method = request.method
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        return response
    finally:
        elapsed = max(0.0, perf_counter() - start)
        http_request_duration_seconds.labels(
            service=settings.service_name,
            route=route,
            method=method,
        ).observe(elapsed)
        http_requests_total.labels(
            service=settings.service_name,
            route=route,
            method=method,
            status_code=str(status_code),
        ).inc()


@app.post("/api/dispatch")
async def dispatch(request: Request, x_correlation_id: str | None = Header(default=None)):
    """Run one action and return its trace.

    The body is read by hand rather than through a pydantic parameter so that
    malformed input still comes back as a `{success: false, error}` result.
    """

    trace_id_ctx.set(x_correlation_id or str(uuid4()))
    try:
        payload = await request.json()
    except ValueError as exc:
        logger.warning("dispatch body is not valid JSON: %s", exc)
        result = ApiResult(success=False, error=f"Invalid JSON body: {exc}")
        return JSONResponse(result.to_payload(), status_code=400)

    status_code, result = await service.handle(payload)
    return JSONResponse(result.to_payload(), status_code=status_code)


@app.get("/api/actions")
def actions():
    """Action catalogue with labels, methods and default bodies."""

    return action_groups()


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


@app.get("/health")
def health():
    """Container health probe endpoint."""

    return {"ok": True}
