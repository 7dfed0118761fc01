"""Integration tests for the document store and the nightly reminder flow."""

import datetime as dt

import pytest

from flows.payment_reminders_nightly import group_by_owner, scan_owner
from invoicegen.storage.documents import CLIENTS, INVOICES, DocumentStore
from tests.factories.data_factories import InvoiceFactory


TODAY = dt.date(2024, 6, 15)


@pytest.mark.integration
class TestDocumentStore:

    async def test_create_get_update_delete(self, db_session):
        store = DocumentStore(db_session)

        doc_id = await store.create(INVOICES, "owner-1", {"invoice_number": "INV-1"})
        doc = await store.get(INVOICES, doc_id)
        assert doc == {"invoice_number": "INV-1", "id": doc_id, "owner_id": "owner-1"}

        assert await store.update(INVOICES, doc_id, {"invoice_number": "INV-2"})
        assert (await store.get(INVOICES, doc_id))["invoice_number"] == "INV-2"

        assert await store.delete(INVOICES, doc_id)
        assert await store.get(INVOICES, doc_id) is None
        assert not await store.delete(INVOICES, doc_id)

    async def test_update_missing_returns_false(self, db_session):
        assert not await DocumentStore(db_session).update(CLIENTS, "missing", {})

    async def test_query_by_owner_is_scoped(self, db_session):
        store = DocumentStore(db_session)
        await store.create(INVOICES, "owner-1", {"n": 1})
        await store.create(INVOICES, "owner-2", {"n": 2})
        await store.create(INVOICES, "owner-1", {"n": 3})

        docs = await store.query_by_owner(INVOICES, "owner-1")

        assert sorted(d["n"] for d in docs) == [1, 3]
        assert len(await store.query_all(INVOICES)) == 3

    async def test_unknown_collection(self, db_session):
        with pytest.raises(ValueError):
            await DocumentStore(db_session).get("orders", "x")


@pytest.mark.integration
class TestReminderScan:

    def test_group_by_owner(self):
        docs = [
            InvoiceFactory(owner_id="a").create().to_document() | {"owner_id": "a"},
            InvoiceFactory(owner_id="b").create().to_document() | {"owner_id": "b"},
            InvoiceFactory(owner_id="a").create().to_document() | {"owner_id": "a"},
        ]

        grouped = group_by_owner(docs)

        assert {owner: len(invs) for owner, invs in grouped.items()} == {"a": 2, "b": 1}

    def test_scan_owner_counts(self):
        factory = InvoiceFactory()
        invoices = [
            factory.create(client_email="late@example.com", due_date=TODAY - dt.timedelta(days=4)),
            factory.create(client_email="soon@example.com", due_date=TODAY + dt.timedelta(days=1)),
            factory.create(client_email="paid@example.com", due_date=TODAY - dt.timedelta(days=9), paid=True),
        ]

        result = scan_owner("owner-123", invoices, TODAY, lead_days=3)

        assert len(result["reminders"]) == 2
        assert result["overdue"] == 1
        assert result["irregular_clients"] == 1
