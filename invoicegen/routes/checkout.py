# ==== CHECKOUT ROUTES MODULE ==== #

"""
Checkout session endpoint used by the public invoice page's "Pay Now" button.

Contract:
    POST {"invoice": {...}} -> 200 {"id": <session id>}
    missing invoice or no line items -> 400 {"message": "Invalid invoice data"}
    provider failure -> 500 {"message": <provider message>}
    any other method -> 405 with ``Allow: POST``
"""

import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from invoicegen.business.errors import CheckoutError, InvalidInvoiceError
from invoicegen.observability.logging import ContextualLogger
from invoicegen.schemas.invoice import Invoice
from invoicegen.services.checkout import CheckoutService, get_checkout_service
from invoicegen.settings import settings


router = APIRouter()
logger = ContextualLogger(__name__)

INVALID_INVOICE = {"message": "Invalid invoice data"}


@router.post("/create-checkout-session")
async def create_checkout_session(
    request: Request,
    checkout: CheckoutService = Depends(get_checkout_service),
) -> JSONResponse:
    """
    Create a hosted checkout session for the posted invoice.

    The redirect origin is taken from the ``Origin`` header, falling back to
    ``PUBLIC_BASE_URL``.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JSONResponse(status_code=400, content=INVALID_INVOICE)

    payload = body.get("invoice") if isinstance(body, dict) else None
    if not isinstance(payload, dict) or not payload.get("items"):
        return JSONResponse(status_code=400, content=INVALID_INVOICE)

    try:
        invoice = Invoice.model_validate(payload)
    except ValidationError as e:
        logger.warning("Rejected checkout payload", errors=e.error_count())
        return JSONResponse(status_code=400, content=INVALID_INVOICE)

    origin = request.headers.get("origin") or settings.PUBLIC_BASE_URL

    try:
        session_id = await checkout.create_session(invoice, origin)
    except InvalidInvoiceError:
        return JSONResponse(status_code=400, content=INVALID_INVOICE)
    except CheckoutError as e:
        return JSONResponse(status_code=e.status_code, content={"message": e.message})

    return JSONResponse(status_code=200, content={"id": session_id})


@router.api_route(
    "/create-checkout-session",
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def checkout_method_not_allowed() -> JSONResponse:
    return JSONResponse(
        status_code=405,
        content={"message": "Method Not Allowed"},
        headers={"Allow": "POST"},
    )
