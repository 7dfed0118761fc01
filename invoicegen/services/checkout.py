# ==== CHECKOUT SESSION CLIENT ==== #

"""
Checkout session creation against the Stripe Checkout HTTP API.

Line item prices are converted to integer minor currency units at this
boundary. No retries: a failed call surfaces immediately to the caller.
"""

import time
from typing import Any, Dict, List, Optional

import httpx

from invoicegen.business.errors import CheckoutError, InvalidInvoiceError
from invoicegen.observability.logging import ContextualLogger, log_business_event
from invoicegen.observability.metrics import checkout_failures_total, checkout_sessions_total
from invoicegen.observability.tracing import get_tracer
from invoicegen.schemas.invoice import Invoice
from invoicegen.services.totals import to_minor_units
from invoicegen.settings import settings


tracer = get_tracer(__name__)
logger = ContextualLogger(__name__)


class CheckoutService:
    """Creates hosted checkout sessions for invoices."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        currency: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.STRIPE_SECRET_KEY
        self.base_url = (base_url or settings.STRIPE_API_BASE).rstrip("/")
        self.currency = (currency or settings.CHECKOUT_CURRENCY).lower()
        self.timeout = timeout or settings.CHECKOUT_TIMEOUT_SECONDS

    def build_line_items(self, invoice: Invoice) -> List[Dict[str, Any]]:
        """Provider line items with unit amounts in cents."""
        return [
            {
                "name": item.description or f"Item {position}",
                "unit_amount": to_minor_units(item.price),
                "quantity": item.quantity,
            }
            for position, item in enumerate(invoice.items, start=1)
        ]

    def _form_params(self, invoice: Invoice, success_url: str, cancel_url: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "mode": "payment",
            "payment_method_types[0]": "card",
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        if invoice.id:
            params["client_reference_id"] = invoice.id

        for i, line in enumerate(self.build_line_items(invoice)):
            prefix = f"line_items[{i}]"
            params[f"{prefix}[price_data][currency]"] = self.currency
            params[f"{prefix}[price_data][product_data][name]"] = line["name"]
            params[f"{prefix}[price_data][unit_amount]"] = str(line["unit_amount"])
            params[f"{prefix}[quantity]"] = str(line["quantity"])

        return params

    async def create_session(self, invoice: Invoice, origin: str) -> str:
        """
        Create a checkout session and return its id.

        Args:
            invoice (Invoice): Invoice to collect payment for
            origin (str): Base URL of the public invoice page for redirects

        Returns:
            str: Provider session id

        Raises:
            InvalidInvoiceError: Invoice has no line items
            CheckoutError: Provider unreachable, misconfigured or rejected the request
        """
        if not invoice.items:
            raise InvalidInvoiceError("Invalid invoice data")

        if not self.api_key:
            checkout_failures_total.labels(error_type="not_configured").inc()
            raise CheckoutError("Checkout provider is not configured")

        origin = origin.rstrip("/")
        success_url = f"{origin}/invoice/{invoice.id}?success=true"
        cancel_url = f"{origin}/invoice/{invoice.id}?canceled=true"

        with tracer.start_as_current_span("create_checkout_session") as span:
            span.set_attribute("item_count", len(invoice.items))
            start_time = time.perf_counter()

            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(
                        f"{self.base_url}/v1/checkout/sessions",
                        data=self._form_params(invoice, success_url, cancel_url),
                        headers={"Authorization": f"Bearer {self.api_key}"},
                    )
            except httpx.HTTPError as e:
                checkout_failures_total.labels(error_type=type(e).__name__).inc()
                logger.error("Checkout provider unreachable", error=str(e))
                raise CheckoutError(str(e) or "Checkout provider unreachable") from e

            span.set_attribute("http.status_code", response.status_code)
            span.set_attribute("duration_ms", int((time.perf_counter() - start_time) * 1000))

            if response.is_error:
                message = _provider_message(response)
                checkout_failures_total.labels(error_type="provider_error").inc()
                logger.error(
                    "Checkout session creation failed",
                    status_code=response.status_code,
                    provider_message=message,
                )
                raise CheckoutError(message)

            session_id = response.json()["id"]
            checkout_sessions_total.inc()
            log_business_event(
                "checkout_session_created",
                invoice.owner_id or "unknown",
                invoice_id=invoice.id,
                session_id=session_id,
            )
            return session_id


def _provider_message(response: httpx.Response) -> str:
    """Extract the provider's error message from an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or "An error occurred"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return "An error occurred"


def get_checkout_service() -> CheckoutService:
    """FastAPI dependency for the checkout client."""
    return CheckoutService()
