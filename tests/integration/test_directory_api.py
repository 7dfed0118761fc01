"""Integration tests for clients, accounts, the public view and dashboard routes."""

import datetime as dt

import pytest


TODAY = dt.date.today()


def _days(offset: int) -> str:
    return (TODAY + dt.timedelta(days=offset)).isoformat()


async def _create_invoice(client, headers, payload, **overrides):
    response = await client.post("/api/invoices", json={**payload, **overrides}, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.mark.integration
class TestClientsApi:

    async def test_clients_derived_from_invoices(self, client, owner_headers, sample_invoice_payload):
        await _create_invoice(client, owner_headers, sample_invoice_payload)
        await _create_invoice(
            client, owner_headers, sample_invoice_payload,
            client_email="JANE@example.com", due_date=_days(-1),
        )

        response = await client.get("/api/clients", headers=owner_headers)

        [jane] = response.json()
        assert jane["total_spent"] == 56.1
        assert jane["invoice_count"] == 2
        assert jane["payment_regularity"] == "irregular"

    async def test_listing_does_not_write_entries(self, client, owner_headers, sample_invoice_payload):
        await _create_invoice(client, owner_headers, sample_invoice_payload)
        await client.get("/api/clients", headers=owner_headers)

        response = await client.get("/api/clients/entries", headers=owner_headers)

        assert response.json() == []

    async def test_entry_crud_and_merge(self, client, owner_headers, sample_invoice_payload):
        await _create_invoice(client, owner_headers, sample_invoice_payload)

        response = await client.post(
            "/api/clients",
            json={"email": "jane@example.com", "phone": "555-0199", "company": "Doe LLC"},
            headers=owner_headers,
        )
        assert response.status_code == 201
        entry_id = response.json()["id"]

        response = await client.get("/api/clients/jane@example.com", headers=owner_headers)
        assert response.json()["phone"] == "555-0199"
        assert response.json()["total_spent"] == 28.05

        response = await client.put(
            f"/api/clients/{entry_id}",
            json={"email": "jane@example.com", "phone": "555-0000"},
            headers=owner_headers,
        )
        assert response.json()["phone"] == "555-0000"

        response = await client.delete(f"/api/clients/{entry_id}", headers=owner_headers)
        assert response.status_code == 204

        response = await client.get("/api/clients/entries", headers=owner_headers)
        assert response.json() == []

    async def test_unknown_client_is_404(self, client, owner_headers):
        response = await client.get("/api/clients/nobody@example.com", headers=owner_headers)
        assert response.status_code == 404

    async def test_entries_are_owner_scoped(self, client, owner_headers, other_owner_headers):
        response = await client.post("/api/clients", json={"email": "x@example.com"}, headers=owner_headers)
        entry_id = response.json()["id"]

        response = await client.delete(f"/api/clients/{entry_id}", headers=other_owner_headers)
        assert response.status_code == 404

    async def test_duplicate_email_is_409(self, client, owner_headers):
        response = await client.post(
            "/api/clients", json={"email": "x@example.com", "phone": "111"}, headers=owner_headers
        )
        assert response.status_code == 201

        response = await client.post(
            "/api/clients", json={"email": " X@Example.com", "phone": "222"}, headers=owner_headers
        )
        assert response.status_code == 409

        response = await client.get("/api/clients/entries", headers=owner_headers)
        assert [e["phone"] for e in response.json()] == ["111"]

    async def test_update_cannot_take_another_entrys_email(self, client, owner_headers):
        await client.post("/api/clients", json={"email": "a@example.com"}, headers=owner_headers)
        response = await client.post("/api/clients", json={"email": "b@example.com"}, headers=owner_headers)
        entry_id = response.json()["id"]

        response = await client.put(
            f"/api/clients/{entry_id}", json={"email": "A@example.com"}, headers=owner_headers
        )
        assert response.status_code == 409

        response = await client.put(
            f"/api/clients/{entry_id}", json={"email": "b@example.com", "phone": "555"}, headers=owner_headers
        )
        assert response.status_code == 200


@pytest.mark.integration
class TestAccountAndPublicView:

    async def test_payment_provider_is_exclusive(self, client, owner_headers):
        response = await client.get("/api/account/payment-provider", headers=owner_headers)
        assert response.json() is None

        await client.post("/api/account/payment-provider/stripe", headers=owner_headers)
        response = await client.post(
            "/api/account/payment-provider/paypal", json={"email": "pay@acme.test"}, headers=owner_headers
        )
        assert response.json()["stripe_connected"] is False

        response = await client.get("/api/account/payment-provider", headers=owner_headers)
        assert response.json() == {"provider": "PayPal", "account_id": "pay@acme.test"}

        await client.delete("/api/account/payment-provider", headers=owner_headers)
        response = await client.get("/api/account/payment-provider", headers=owner_headers)
        assert response.json() is None

    async def test_public_view_without_provider(self, client, owner_headers, sample_invoice_payload):
        invoice = await _create_invoice(client, owner_headers, sample_invoice_payload)

        response = await client.get(f"/public/invoices/{invoice['id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["invoice"]["total"] == 28.05
        assert data["pay_now_available"] is False
        assert data["watermark"].startswith("Created with InvoiceGen")

    async def test_public_view_with_stripe(self, client, owner_headers, sample_invoice_payload):
        invoice = await _create_invoice(client, owner_headers, sample_invoice_payload)
        await client.post("/api/account/payment-provider/stripe", headers=owner_headers)

        response = await client.get(f"/public/invoices/{invoice['id']}")

        assert response.json()["pay_now_available"] is True
        assert response.json()["payment_provider"] == "Stripe"

    async def test_public_view_unknown_invoice(self, client):
        response = await client.get("/public/invoices/missing")
        assert response.status_code == 404


@pytest.mark.integration
class TestDashboardApi:

    async def test_summary(self, client, owner_headers, sample_invoice_payload):
        first = await _create_invoice(client, owner_headers, sample_invoice_payload)
        await _create_invoice(client, owner_headers, sample_invoice_payload, due_date=_days(-1))
        await client.post(f"/api/invoices/{first['id']}/mark-paid", headers=owner_headers)

        response = await client.get("/api/dashboard/summary", headers=owner_headers)

        assert response.json() == {
            "total_revenue": 56.1,
            "invoice_count": 2,
            "paid_count": 1,
            "pending_count": 1,
            "overdue_count": 1,
        }

    async def test_analytics_timeframe(self, client, owner_headers, sample_invoice_payload):
        await _create_invoice(client, owner_headers, sample_invoice_payload, date=_days(-5), due_date=_days(25))
        await _create_invoice(client, owner_headers, sample_invoice_payload, date=_days(-160), due_date=_days(-130))

        response = await client.get(
            "/api/dashboard/analytics", params={"timeframe": "7d"}, headers=owner_headers
        )

        data = response.json()
        assert data["timeframe"] == "7d"
        assert [m["month"] for m in data["monthly_revenue"]] == [(TODAY - dt.timedelta(days=5)).strftime("%Y-%m")]
        assert data["client_metrics"]["total_clients"] == 1

    async def test_invalid_timeframe_is_422(self, client, owner_headers):
        response = await client.get(
            "/api/dashboard/analytics", params={"timeframe": "2w"}, headers=owner_headers
        )
        assert response.status_code == 422

    async def test_reminders(self, client, owner_headers, sample_invoice_payload):
        await _create_invoice(client, owner_headers, sample_invoice_payload, due_date=_days(-5))
        await _create_invoice(client, owner_headers, sample_invoice_payload, due_date=_days(2))
        await _create_invoice(client, owner_headers, sample_invoice_payload, due_date=_days(60))

        response = await client.get("/api/reminders", headers=owner_headers)

        assert [r["type"] for r in response.json()] == ["overdue", "upcoming"]
