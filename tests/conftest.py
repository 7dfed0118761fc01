# ==== SHARED TEST FIXTURES AND CONFIGURATION ==== #

"""
Shared test fixtures and configuration.

Tests run against an in-memory SQLite document store (aiosqlite) and the
ASGI app through httpx, with the checkout provider mocked by respx.
"""

import datetime as dt
import os

import pytest
import pytest_asyncio
from freezegun import freeze_time
from httpx import AsyncClient, ASGITransport


# ==== FORCE ENVIRONMENT SETUP BEFORE ANY IMPORTS ==== #

# Set environment variables BEFORE importing any invoicegen modules
os.environ.update({
    "APP_ENV": "test",
    "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
    "LOG_LEVEL": "WARNING",
    "LOG_TO_FILES": "false",
    "PUBLIC_BASE_URL": "http://invoices.test",
    "STRIPE_API_BASE": "https://stripe.test",
    "STRIPE_SECRET_KEY": "sk_test_12345",
})

# Now import app modules after environment is set
from invoicegen.main import create_app
from invoicegen.storage import db as db_module
from invoicegen.storage.db import create_schema, get_session, init_database


# ==== DATABASE FIXTURES ==== #


@pytest_asyncio.fixture
async def database():
    """
    Fresh in-memory database per test.

    The engine uses a single static connection, so disposing it drops every
    table and the next test starts empty.
    """
    await db_module.close_database()
    init_database()
    await create_schema()
    yield
    await db_module.close_database()


@pytest_asyncio.fixture
async def db_session(database):
    """Database session committed when the test body finishes."""
    async with get_session() as session:
        yield session


# ==== APPLICATION FIXTURES ==== #


@pytest_asyncio.fixture
async def app(database):
    """FastAPI test application over the in-memory store."""
    return create_app()


@pytest_asyncio.fixture
async def client(app):
    """
    Create test client.

    Returns:
        AsyncClient: HTTP test client instance
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ==== OWNER AND HEADER FIXTURES ==== #


@pytest.fixture
def owner_id():
    return "owner-123"


@pytest.fixture
def owner_headers(owner_id):
    """Headers carrying the authenticated owner id."""
    return {"X-Owner-Id": owner_id}


@pytest.fixture
def other_owner_headers():
    return {"X-Owner-Id": "owner-456"}


# ==== TIME FIXTURES ==== #


@pytest.fixture
def today():
    return dt.date(2024, 6, 15)


@pytest.fixture
def frozen_time(today):
    """
    Frozen clock for date-dependent aggregation.

    Returns:
        FrozenDateTimeFactory: Time freezing context
    """
    with freeze_time(today.isoformat()) as frozen:
        yield frozen


# ==== SAMPLE DATA FIXTURES ==== #


@pytest.fixture
def sample_invoice_payload():
    """Invoice as posted by the invoice form."""
    return {
        "business_name": "Acme Design",
        "business_address": "1 Main St",
        "business_phone": "555-0100",
        "invoice_number": "INV-001",
        "date": "2024-06-01",
        "due_date": "2024-07-01",
        "client_name": "Jane Doe",
        "client_email": "jane@example.com",
        "items": [
            {"description": "Logo design", "quantity": 2, "price": 10},
            {"description": "Business cards", "quantity": 1, "price": 5.5},
        ],
        "notes": "Thank you!",
        "tax_rate": 10,
        "payment_terms": {"bank_transfer": None, "credit_card": None, "paypal": None},
    }
