# ==== CLIENT SERVICE ==== #

"""
Client directory persistence and read-time aggregation.

Only explicit create/edit/delete actions write to the ``clients`` collection;
listing clients never writes back the merged figures.
"""

import datetime as dt
from typing import List, Optional

from invoicegen.business.errors import ClientNotFoundError, DuplicateClientError
from invoicegen.observability.logging import log_business_event
from invoicegen.observability.metrics import client_directory_writes_total
from invoicegen.schemas.client import ClientEntry, ClientSummary
from invoicegen.services.client_directory import (
    build_client_directory,
    email_key,
    summarize_client,
)
from invoicegen.services.invoices import InvoiceService
from invoicegen.storage.documents import DocumentStore, CLIENTS


class ClientService:
    """Owner-scoped client directory."""

    def __init__(self, store: DocumentStore):
        self.store = store
        self.invoices = InvoiceService(store)

    async def list_entries(self, owner_id: str) -> List[ClientEntry]:
        docs = await self.store.query_by_owner(CLIENTS, owner_id)
        return [ClientEntry.model_validate(doc) for doc in docs]

    async def list_clients(self, owner_id: str, today: Optional[dt.date] = None) -> List[ClientSummary]:
        """Merged directory for the owner's dashboard."""
        invoices = await self.invoices.list_for_owner(owner_id)
        entries = await self.list_entries(owner_id)
        return build_client_directory(invoices, entries, today)

    async def get_client(self, owner_id: str, email: str, today: Optional[dt.date] = None) -> ClientSummary:
        """
        Merged view of a single client looked up by email.

        Raises:
            ClientNotFoundError: No invoices and no directory entry for the email
        """
        key = email_key(email)
        invoices = [
            inv for inv in await self.invoices.list_for_owner(owner_id)
            if inv.client_email and email_key(inv.client_email) == key
        ]
        entry = next(
            (e for e in await self.list_entries(owner_id) if email_key(e.email) == key),
            None,
        )
        if not invoices and entry is None:
            raise ClientNotFoundError(email)
        return summarize_client(invoices, entry, today)

    async def _get_entry(self, owner_id: str, client_id: str) -> ClientEntry:
        doc = await self.store.get(CLIENTS, client_id)
        if doc is None or doc["owner_id"] != owner_id:
            raise ClientNotFoundError(client_id)
        return ClientEntry.model_validate(doc)

    async def _ensure_unique_email(self, owner_id: str, email: str, client_id: Optional[str] = None) -> None:
        key = email_key(email)
        for existing in await self.list_entries(owner_id):
            if existing.id != client_id and email_key(existing.email) == key:
                raise DuplicateClientError(email)

    async def create_entry(self, owner_id: str, entry: ClientEntry) -> ClientEntry:
        await self._ensure_unique_email(owner_id, entry.email)
        client_id = await self.store.create(CLIENTS, owner_id, entry.to_document())
        client_directory_writes_total.labels(operation="create").inc()
        log_business_event("client_saved", owner_id, client_id=client_id)
        return entry.model_copy(update={"id": client_id})

    async def update_entry(self, owner_id: str, client_id: str, entry: ClientEntry) -> ClientEntry:
        await self._get_entry(owner_id, client_id)
        await self._ensure_unique_email(owner_id, entry.email, client_id)
        await self.store.update(CLIENTS, client_id, entry.to_document())
        client_directory_writes_total.labels(operation="update").inc()
        log_business_event("client_saved", owner_id, client_id=client_id)
        return entry.model_copy(update={"id": client_id})

    async def delete_entry(self, owner_id: str, client_id: str) -> None:
        await self._get_entry(owner_id, client_id)
        await self.store.delete(CLIENTS, client_id)
        client_directory_writes_total.labels(operation="delete").inc()
        log_business_event("client_deleted", owner_id, client_id=client_id)
