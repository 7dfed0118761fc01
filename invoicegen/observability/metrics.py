# ==== PROMETHEUS METRICS ==== #

"""
Prometheus metrics for InvoiceGen.

Request latency, invoice lifecycle counters, checkout provider outcomes and
receivables health, exposed for scraping on the metrics router.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    REGISTRY
)


# ==== REQUEST METRICS ==== #

http_request_latency_seconds = Histogram(
    "invoicegen_http_request_latency_seconds",
    "HTTP request latency in seconds",
    ["method", "route", "status_code"]
)


# ==== INVOICE METRICS ==== #

invoices_created_total = Counter(
    "invoicegen_invoices_created_total",
    "Total invoices created"
)

invoices_updated_total = Counter(
    "invoicegen_invoices_updated_total",
    "Total invoice updates by operation",
    ["operation"]
)

invoices_deleted_total = Counter(
    "invoicegen_invoices_deleted_total",
    "Total invoices deleted"
)

invoice_total_amount = Histogram(
    "invoicegen_invoice_total_amount",
    "Invoice totals at save time in currency units",
    buckets=[10, 50, 100, 250, 500, 1000, 2500, 5000, 10000, 50000]
)

overdue_invoices = Gauge(
    "invoicegen_overdue_invoices",
    "Number of unpaid invoices past their due date at the last reminder scan"
)


# ==== CHECKOUT METRICS ==== #

checkout_sessions_total = Counter(
    "invoicegen_checkout_sessions_total",
    "Total checkout sessions created"
)

checkout_failures_total = Counter(
    "invoicegen_checkout_failures_total",
    "Total checkout session failures by error type",
    ["error_type"]
)


# ==== CLIENT DIRECTORY METRICS ==== #

client_directory_writes_total = Counter(
    "invoicegen_client_directory_writes_total",
    "Total explicit client directory writes",
    ["operation"]
)


# ==== DATABASE METRICS ==== #

db_connections_active = Gauge(
    "invoicegen_db_connections_active",
    "Number of active database sessions"
)


# ==== SYSTEM METRICS ==== #

app_info = Gauge(
    "invoicegen_app_info",
    "Application information",
    ["version", "environment", "service_name"]
)


def init_metrics(app) -> None:
    """Initialize metrics collection.

    Args:
        app: FastAPI application instance
    """
    from invoicegen.settings import settings
    app_info.labels(
        version=settings.SERVICE_VERSION,
        environment=settings.APP_ENV,
        service_name=settings.SERVICE_NAME
    ).set(1)


# Metrics router for Prometheus scraping
metrics_router = APIRouter()


@metrics_router.get("/metrics")
def get_metrics() -> PlainTextResponse:
    """Expose Prometheus metrics for scraping.

    Returns:
        Prometheus metrics in text format
    """
    return PlainTextResponse(
        generate_latest(REGISTRY).decode("utf-8"),
        media_type="text/plain"
    )
