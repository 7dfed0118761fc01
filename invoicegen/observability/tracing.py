# ==== OPENTELEMETRY TRACING CONFIGURATION ==== #

"""
OpenTelemetry tracing configuration for InvoiceGen.

Sets up OTLP span export when an endpoint is configured and instruments the
database engine and the outbound HTTP client used for checkout sessions.
"""

from typing import Dict, Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

from invoicegen.settings import settings


# ==== TRACING INITIALIZATION ==== #

def init_tracing(service_name: str) -> None:
    """
    Initialize OpenTelemetry tracing with an OTLP exporter.

    Does nothing when no OTLP endpoint is configured, so local runs and
    tests work without an APM backend.

    Args:
        service_name (str): Name of the service for tracing identification
    """
    endpoint = settings.OTEL_EXPORTER_OTLP_ENDPOINT

    # ⚠️ Allow local runs without SaaS APM
    if not endpoint:
        return

    # --► RESOURCE ATTRIBUTES CONFIGURATION
    resource_attrs = _parse_resource_attributes(
        settings.OTEL_RESOURCE_ATTRIBUTES or ""
    )
    resource_attrs["service.name"] = settings.OTEL_SERVICE_NAME or service_name

    # --► TRACER PROVIDER SETUP
    provider = TracerProvider(resource=Resource.create(resource_attrs))

    exporter = OTLPSpanExporter(
        endpoint=endpoint,
        headers=_parse_headers(settings.OTEL_EXPORTER_OTLP_HEADERS)
    )

    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    _setup_auto_instrumentation()


def _parse_headers(headers_str: str | None) -> Dict[str, str]:
    """Parse OTLP headers from a comma-separated key=value string."""
    headers = {}
    if not headers_str:
        return headers

    for part in headers_str.split(","):
        if "=" in part:
            key, value = part.split("=", 1)
            headers[key.strip()] = value.strip()

    return headers


def _parse_resource_attributes(attrs_str: str) -> Dict[str, Any]:
    """Parse OTEL resource attributes from a comma-separated key=value string."""
    attrs = {}
    for part in filter(None, map(str.strip, attrs_str.split(","))):
        if "=" in part:
            key, value = part.split("=", 1)
            attrs[key] = value

    return attrs


def _setup_auto_instrumentation() -> None:
    """Setup automatic instrumentation for the database and HTTP client."""
    try:
        SQLAlchemyInstrumentor().instrument()
        HTTPXClientInstrumentor().instrument()
    except Exception as e:
        # Don't fail startup if instrumentation fails
        print(f"Warning: Failed to setup auto-instrumentation: {e}")


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer instance for the given module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Tracer instance
    """
    return trace.get_tracer(name)
