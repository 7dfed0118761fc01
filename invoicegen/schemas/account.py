"""Pydantic schemas for owner accounts and payment provider connections."""

from typing import Optional

from pydantic import BaseModel, Field


class Account(BaseModel):
    """Owner profile relevant to invoicing."""

    owner_id: str
    subscribed: bool = False
    stripe_connected: bool = False
    paypal_email: Optional[str] = None

    def to_document(self) -> dict:
        return self.model_dump(mode="json", exclude={"owner_id"})


class ConnectedProvider(BaseModel):
    """Payment provider currently connected to an account."""

    provider: str
    account_id: str


class PayPalConnectRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)


class SubscriptionUpdateRequest(BaseModel):
    subscribed: bool
