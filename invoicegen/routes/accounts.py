# ==== ACCOUNT ROUTES MODULE ==== #

"""
Account routes: subscription tier and payment provider connection.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from invoicegen.middleware.ownership import get_owner_id
from invoicegen.schemas.account import (
    Account,
    ConnectedProvider,
    PayPalConnectRequest,
    SubscriptionUpdateRequest,
)
from invoicegen.services.payment_providers import AccountService
from invoicegen.storage.documents import DocumentStore, get_document_store


router = APIRouter()


@router.get("", response_model=Account)
async def get_account(
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> Account:
    return await AccountService(store).get(get_owner_id(request))


@router.put("/subscription", response_model=Account)
async def update_subscription(
    update: SubscriptionUpdateRequest,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> Account:
    """Change the tier. Existing invoices keep their watermark flag."""
    return await AccountService(store).set_subscription(get_owner_id(request), update.subscribed)


# ==== PAYMENT PROVIDER ==== #


@router.get("/payment-provider", response_model=Optional[ConnectedProvider])
async def get_payment_provider(
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> Optional[ConnectedProvider]:
    """Currently connected provider, or ``null`` when none is connected."""
    return await AccountService(store).get_connected_provider(get_owner_id(request))


@router.post("/payment-provider/stripe", response_model=Account)
async def connect_stripe(
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> Account:
    return await AccountService(store).connect_stripe(get_owner_id(request))


@router.post("/payment-provider/paypal", response_model=Account)
async def connect_paypal(
    payload: PayPalConnectRequest,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> Account:
    return await AccountService(store).connect_paypal(get_owner_id(request), payload.email)


@router.delete("/payment-provider", response_model=Account)
async def disconnect_payment_provider(
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> Account:
    return await AccountService(store).disconnect(get_owner_id(request))
