# ==== DASHBOARD ROUTES MODULE ==== #

"""
Dashboard statistics and analytics for the owner's invoices.
"""

from fastapi import APIRouter, Depends, Query, Request

from invoicegen.middleware.ownership import get_owner_id
from invoicegen.observability.tracing import get_tracer
from invoicegen.schemas.dashboard import AnalyticsReport, DashboardSummary, Timeframe
from invoicegen.services.analytics import analytics_report, summarize
from invoicegen.services.invoices import InvoiceService
from invoicegen.storage.documents import DocumentStore, get_document_store


router = APIRouter()
tracer = get_tracer(__name__)


@router.get("/summary", response_model=DashboardSummary)
async def get_summary(
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> DashboardSummary:
    """Revenue billed and paid/pending/overdue invoice counts."""
    owner_id = get_owner_id(request)

    with tracer.start_as_current_span("dashboard_summary") as span:
        span.set_attribute("owner_id", owner_id)
        invoices = await InvoiceService(store).list_for_owner(owner_id)
        return summarize(invoices)


@router.get("/analytics", response_model=AnalyticsReport)
async def get_analytics(
    request: Request,
    store: DocumentStore = Depends(get_document_store),
    timeframe: Timeframe = Query(Timeframe.MONTH, description="Reporting window: 7d, 30d, 90d or 1y"),
) -> AnalyticsReport:
    """
    Monthly revenue and client metrics for invoices issued within the window.

    Args:
        timeframe (Timeframe): Reporting window ending today
    """
    owner_id = get_owner_id(request)

    with tracer.start_as_current_span("dashboard_analytics") as span:
        span.set_attribute("owner_id", owner_id)
        span.set_attribute("timeframe", timeframe.value)
        invoices = await InvoiceService(store).list_for_owner(owner_id)
        return analytics_report(invoices, timeframe)
