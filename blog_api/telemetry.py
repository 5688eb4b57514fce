"""
Observability setup:
  - OpenTelemetry distributed tracing (OTLP gRPC export when an endpoint is set)
  - Prometheus metrics for signups, auth failures, posts and image uploads

Both are initialised once at startup and injected into FastAPI via middleware.
"""
import logging

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from prometheus_client import Counter, Histogram

from blog_api.config import settings
from blog_api.database import engine

logger = logging.getLogger(__name__)

# ─────────────────────────── Prometheus Metrics ───────────────────────────
SIGNUPS_TOTAL = Counter(
    "signups_total",
    "Total number of accounts created",
)

AUTH_FAILURES_TOTAL = Counter(
    "auth_failures_total",
    "Requests rejected by the auth gate or at signin",
    ["reason"],  # 'missing' | 'invalid' | 'bad_credentials'
)

POSTS_CREATED_TOTAL = Counter(
    "posts_created_total",
    "Total number of blog posts created",
)

IMAGE_UPLOADS_TOTAL = Counter(
    "image_uploads_total",
    "Image relay outcomes",
    ["outcome"],  # 'success' | 'rejected' | 'provider_error'
)

IMAGE_UPLOAD_LATENCY = Histogram(
    "image_upload_latency_seconds",
    "Time spent forwarding an image to the storage provider",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)


# ─────────────────────────── OpenTelemetry Setup ──────────────────────────
def setup_tracing() -> None:
    """Configure the global OTel TracerProvider; export only if an endpoint is set."""
    resource = Resource.create(
        {
            "service.name": settings.service_name,
            "deployment.environment": settings.environment,
        }
    )

    provider = TracerProvider(resource=resource)

    if settings.otel_exporter_otlp_endpoint:
        try:
            otlp_exporter = OTLPSpanExporter(
                endpoint=settings.otel_exporter_otlp_endpoint,
                insecure=True,
            )
            provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
            logger.info(
                "OTel tracing configured → %s", settings.otel_exporter_otlp_endpoint
            )
        except Exception as exc:
            logger.warning("Could not connect to OTLP exporter: %s — traces disabled", exc)

    trace.set_tracer_provider(provider)

    # Auto-instrument the outbound HTTP client and the ORM engine
    HTTPXClientInstrumentor().instrument()
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


def instrument_app(app) -> None:  # noqa: ANN001
    """Call after app is created to add FastAPI request spans."""
    FastAPIInstrumentor.instrument_app(app)
