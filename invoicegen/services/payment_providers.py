# ==== PAYMENT PROVIDER CONNECTIONS ==== #

"""
Account profile and payment provider connections.

An owner has at most one connected provider: connecting Stripe clears the
PayPal email and connecting PayPal clears the Stripe connection.
"""

from typing import Optional

from invoicegen.observability.logging import log_business_event
from invoicegen.schemas.account import Account, ConnectedProvider
from invoicegen.storage.documents import DocumentStore, ACCOUNTS


STRIPE = "Stripe"
PAYPAL = "PayPal"


def connected_provider(account: Account) -> Optional[ConnectedProvider]:
    """Provider accepting online payments for this account, if any."""
    if account.stripe_connected:
        return ConnectedProvider(provider=STRIPE, account_id="Connected")
    if account.paypal_email:
        return ConnectedProvider(provider=PAYPAL, account_id=account.paypal_email)
    return None


class AccountService:
    """Reads and writes the owner's account document (id == owner id)."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get(self, owner_id: str) -> Account:
        """Load the account, defaulting to a free-tier profile if none is stored."""
        doc = await self.store.get(ACCOUNTS, owner_id)
        if doc is None:
            return Account(owner_id=owner_id)
        return Account.model_validate(doc)

    async def _save(self, account: Account) -> Account:
        data = account.to_document()
        if not await self.store.update(ACCOUNTS, account.owner_id, data):
            await self.store.create(ACCOUNTS, account.owner_id, data, doc_id=account.owner_id)
        return account

    async def connect_stripe(self, owner_id: str) -> Account:
        account = await self.get(owner_id)
        account = account.model_copy(update={"stripe_connected": True, "paypal_email": None})
        log_business_event("payment_provider_connected", owner_id, provider=STRIPE)
        return await self._save(account)

    async def connect_paypal(self, owner_id: str, email: str) -> Account:
        account = await self.get(owner_id)
        account = account.model_copy(
            update={"stripe_connected": False, "paypal_email": email.strip()}
        )
        log_business_event("payment_provider_connected", owner_id, provider=PAYPAL)
        return await self._save(account)

    async def disconnect(self, owner_id: str) -> Account:
        account = await self.get(owner_id)
        account = account.model_copy(update={"stripe_connected": False, "paypal_email": None})
        log_business_event("payment_provider_disconnected", owner_id)
        return await self._save(account)

    async def set_subscription(self, owner_id: str, subscribed: bool) -> Account:
        account = await self.get(owner_id)
        return await self._save(account.model_copy(update={"subscribed": subscribed}))

    async def get_connected_provider(self, owner_id: str) -> Optional[ConnectedProvider]:
        return connected_provider(await self.get(owner_id))
