"""Unit tests for the checkout session client."""

import httpx
import pytest
import respx

from invoicegen.business.errors import CheckoutError, InvalidInvoiceError
from invoicegen.services.checkout import CheckoutService
from tests.factories.data_factories import InvoiceFactory


STRIPE_URL = "https://stripe.test/v1/checkout/sessions"


@pytest.fixture
def service():
    return CheckoutService(api_key="sk_test_abc", base_url="https://stripe.test", currency="usd")


@pytest.fixture
def invoice():
    return InvoiceFactory().create(
        items=[
            {"description": "Logo design", "quantity": 2, "price": "10.005"},
            {"description": "", "quantity": 1, "price": "5.50"},
        ]
    )


@pytest.mark.unit
class TestLineItems:

    def test_prices_in_cents(self, service, invoice):
        lines = service.build_line_items(invoice)

        assert lines == [
            {"name": "Logo design", "unit_amount": 1001, "quantity": 2},
            {"name": "Item 2", "unit_amount": 550, "quantity": 1},
        ]


@pytest.mark.unit
class TestCreateSession:

    @respx.mock
    async def test_success_returns_session_id(self, service, invoice):
        route = respx.post(STRIPE_URL).mock(
            return_value=httpx.Response(200, json={"id": "cs_test_123"})
        )

        session_id = await service.create_session(invoice, "https://app.test/")

        assert session_id == "cs_test_123"
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer sk_test_abc"
        body = request.content.decode()
        assert "mode=payment" in body
        assert "line_items%5B0%5D%5Bprice_data%5D%5Bunit_amount%5D=1001" in body
        assert f"invoice%2F{invoice.id}%3Fsuccess%3Dtrue" in body

    async def test_empty_items_rejected_without_call(self, service):
        invoice = InvoiceFactory().create(items=[])

        with respx.mock(assert_all_called=False) as mock:
            route = mock.post(STRIPE_URL)
            with pytest.raises(InvalidInvoiceError):
                await service.create_session(invoice, "https://app.test")
            assert not route.called

    @respx.mock
    async def test_provider_error_message_surfaces(self, service, invoice):
        respx.post(STRIPE_URL).mock(
            return_value=httpx.Response(400, json={"error": {"message": "Invalid currency"}})
        )

        with pytest.raises(CheckoutError) as exc_info:
            await service.create_session(invoice, "https://app.test")

        assert exc_info.value.message == "Invalid currency"
        assert exc_info.value.status_code == 500

    @respx.mock
    async def test_network_error_is_checkout_error(self, service, invoice):
        respx.post(STRIPE_URL).mock(side_effect=httpx.ConnectError("connection refused"))

        with pytest.raises(CheckoutError):
            await service.create_session(invoice, "https://app.test")

    async def test_missing_key_is_checkout_error(self, invoice):
        service = CheckoutService(api_key="", base_url="https://stripe.test")

        with pytest.raises(CheckoutError):
            await service.create_session(invoice, "https://app.test")
