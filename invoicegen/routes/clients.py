# ==== CLIENT ROUTES MODULE ==== #

"""
Client directory routes for InvoiceGen.

Listing merges saved directory entries with figures derived from the
owner's invoices; only explicit entry create/edit/delete calls write.
"""

from typing import List

from fastapi import APIRouter, Depends, Request, Response

from invoicegen.middleware.ownership import get_owner_id
from invoicegen.observability.tracing import get_tracer
from invoicegen.schemas.client import ClientEntry, ClientSummary
from invoicegen.services.clients import ClientService
from invoicegen.storage.documents import DocumentStore, get_document_store


router = APIRouter()
tracer = get_tracer(__name__)


@router.get("", response_model=List[ClientSummary])
async def list_clients(
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> List[ClientSummary]:
    """
    Client directory ordered by total spent, highest first.

    Clients known only from invoices are included with empty contact
    details.
    """
    owner_id = get_owner_id(request)

    with tracer.start_as_current_span("list_clients") as span:
        span.set_attribute("owner_id", owner_id)
        clients = await ClientService(store).list_clients(owner_id)
        span.set_attribute("result_count", len(clients))
        return clients


# ⚠️ Must be registered before /{email} so it is not captured as an email
@router.get("/entries", response_model=List[ClientEntry])
async def list_entries(
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> List[ClientEntry]:
    """Saved directory entries only, without invoice figures."""
    return await ClientService(store).list_entries(get_owner_id(request))


@router.get("/{email}", response_model=ClientSummary)
async def get_client(
    email: str,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> ClientSummary:
    return await ClientService(store).get_client(get_owner_id(request), email)


# ==== DIRECTORY ENTRIES ==== #


@router.post("", response_model=ClientEntry, status_code=201)
async def create_entry(
    entry: ClientEntry,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> ClientEntry:
    return await ClientService(store).create_entry(get_owner_id(request), entry)


@router.put("/{client_id}", response_model=ClientEntry)
async def update_entry(
    client_id: str,
    entry: ClientEntry,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> ClientEntry:
    return await ClientService(store).update_entry(get_owner_id(request), client_id, entry)


@router.delete("/{client_id}", status_code=204)
async def delete_entry(
    client_id: str,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> Response:
    await ClientService(store).delete_entry(get_owner_id(request), client_id)
    return Response(status_code=204)
