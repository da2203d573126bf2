"""OpenTelemetry setup for the dispatcher and a shared tracer for upstream calls."""

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

from apiprobe.common.config import settings


# Resolves through the global proxy, so spans are no-ops until setup_tracing runs.
tracer = trace.get_tracer("apiprobe")


def setup_tracing(service_name: str) -> bool:
    """Register a tracer provider with OTLP HTTP exporter when tracing is enabled."""

    if not settings.tracing_enabled:
        return False
    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    return True


def instrument_app(app: FastAPI) -> None:
    """Attach FastAPI auto-instrumentation for inbound request spans."""

    if settings.tracing_enabled:
        FastAPIInstrumentor.instrument_app(app)
