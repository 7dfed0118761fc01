# ==== DOCUMENT STORE ==== #

"""
Document-style persistence over SQLAlchemy for InvoiceGen.

Each collection is a table of JSON documents keyed by an opaque string id and
carrying the owning user id as a filterable column. Writes replace the whole
document; the last writer wins.
"""

import uuid
from typing import Any, Dict, List, Optional, Type

from fastapi import Depends
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from invoicegen.observability.tracing import get_tracer
from invoicegen.storage.db import get_db_session
from invoicegen.storage.models import (
    AccountDocument,
    ClientDocument,
    DocumentMixin,
    InvoiceDocument,
)


tracer = get_tracer(__name__)

INVOICES = "invoices"
CLIENTS = "clients"
ACCOUNTS = "accounts"

COLLECTIONS: Dict[str, Type[DocumentMixin]] = {
    INVOICES: InvoiceDocument,
    CLIENTS: ClientDocument,
    ACCOUNTS: AccountDocument,
}


def _as_dict(row: DocumentMixin) -> Dict[str, Any]:
    return {**row.data, "id": row.id, "owner_id": row.owner_id}


class DocumentStore:
    """
    Create/read/query/update/delete over the document collections.

    Returned documents are plain dicts with ``id`` and ``owner_id`` merged in
    from their columns.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _model(self, collection: str) -> Type[DocumentMixin]:
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    async def create(
        self,
        collection: str,
        owner_id: str,
        data: Dict[str, Any],
        doc_id: Optional[str] = None
    ) -> str:
        """Insert a new document and return its id."""
        model = self._model(collection)
        with tracer.start_as_current_span("document_create") as span:
            span.set_attribute("collection", collection)
            doc_id = doc_id or uuid.uuid4().hex
            self.session.add(model(id=doc_id, owner_id=owner_id, data=data))
            await self.session.flush()
            return doc_id

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a document by id, or ``None``."""
        row = await self.session.get(self._model(collection), doc_id)
        return _as_dict(row) if row is not None else None

    async def query_by_owner(self, collection: str, owner_id: str) -> List[Dict[str, Any]]:
        """All documents of one owner, oldest first."""
        model = self._model(collection)
        with tracer.start_as_current_span("document_query_by_owner") as span:
            span.set_attribute("collection", collection)
            result = await self.session.execute(
                select(model)
                .where(model.owner_id == owner_id)
                .order_by(model.created_at, model.id)
            )
            rows = result.scalars().all()
            span.set_attribute("result_count", len(rows))
            return [_as_dict(row) for row in rows]

    async def query_all(self, collection: str) -> List[Dict[str, Any]]:
        """Every document in a collection, across owners (batch jobs only)."""
        model = self._model(collection)
        result = await self.session.execute(select(model).order_by(model.created_at, model.id))
        return [_as_dict(row) for row in result.scalars().all()]

    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> bool:
        """Replace a document body. Returns ``False`` if it does not exist."""
        row = await self.session.get(self._model(collection), doc_id)
        if row is None:
            return False
        row.data = data
        await self.session.flush()
        return True

    async def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Returns ``False`` if it did not exist."""
        model = self._model(collection)
        result = await self.session.execute(delete(model).where(model.id == doc_id))
        return result.rowcount > 0


async def get_document_store(db: AsyncSession = Depends(get_db_session)) -> DocumentStore:
    """FastAPI dependency wrapping the request's database session."""
    return DocumentStore(db)
