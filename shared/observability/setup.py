import logging
import structlog
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

# OpenTelemetry
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from shared.config import settings

# 1. Structlog Processor: Injects Trace/Span IDs into every log line
def add_otel_ids(logger, log_method, event_dict):
    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = trace.format_trace_id(ctx.trace_id)
        event_dict["span_id"] = trace.format_span_id(ctx.span_id)
    return event_dict

# 2. Configure Structlog for JSON output
def configure_logging():
    level = logging.getLevelName(settings.LOG_LEVEL)
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_otel_ids,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

# 3. Configure OpenTelemetry Tracing
def configure_tracing(app: FastAPI, service_name: str):
    # The first service to boot owns the global provider; the rest reuse it.
    if not isinstance(trace.get_tracer_provider(), TracerProvider):
        resource = Resource.create({SERVICE_NAME: service_name})
        provider = TracerProvider(resource=resource)
        exporter = OTLPSpanExporter(endpoint=settings.OTLP_ENDPOINT, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)

    # Auto-instrument FastAPI (creates spans for all incoming requests)
    FastAPIInstrumentor.instrument_app(app)

# 4. Configure Prometheus Metrics
def configure_metrics(app: FastAPI):
    # Tracks HTTP request latency, status codes, etc. and exposes /metrics
    Instrumentator().instrument(app).expose(app, include_in_schema=False)

# --- THE MASTER SETUP FUNCTION ---
def setup_observability(app: FastAPI, service_name: str):
    """
    Bootstraps Logging, Tracing, and Metrics for a FastAPI app.
    Call this once per sub-app, right after creating it.
    """
    configure_logging()
    if settings.TRACING_ENABLED:
        configure_tracing(app, service_name)
    configure_metrics(app)
