"""Unit tests for invoice totals computation."""

from decimal import Decimal

import pytest

from invoicegen.schemas.invoice import Invoice, InvoiceItem
from invoicegen.services.totals import (
    compute_totals,
    to_decimal,
    to_minor_units,
    to_quantity,
)


def _items(*pairs):
    return [InvoiceItem(quantity=q, price=p) for q, p in pairs]


@pytest.mark.unit
class TestComputeTotals:
    """Subtotal, tax and total derivation."""

    def test_basic_invoice(self):
        """Two lines at 10% tax."""
        totals = compute_totals(_items((2, 10), (1, 5.5)), 10)

        assert totals.subtotal == Decimal("25.50")
        assert totals.tax_amount == Decimal("2.55")
        assert totals.total == Decimal("28.05")

    def test_empty_items_are_zero(self):
        totals = compute_totals([], 10)

        assert totals.subtotal == Decimal("0.00")
        assert totals.tax_amount == Decimal("0.00")
        assert totals.total == Decimal("0.00")

    def test_subtotal_independent_of_order(self):
        items = _items((3, "19.99"), (1, "0.01"), (7, "2.35"))

        forward = compute_totals(items, "8.25")
        backward = compute_totals(list(reversed(items)), "8.25")

        assert forward == backward

    def test_no_float_drift(self):
        """0.1 + 0.2 must be exactly 0.30."""
        totals = compute_totals(_items((1, 0.1), (1, 0.2)), 0)
        assert totals.subtotal == Decimal("0.30")

    @pytest.mark.parametrize("rate", ["0", "5", "7.5", "19.6", "100"])
    def test_total_is_subtotal_plus_tax_within_a_cent(self, rate):
        totals = compute_totals(_items((3, "33.33"), (2, "0.125")), rate)
        expected = totals.subtotal + totals.subtotal * Decimal(rate) / 100
        assert abs(totals.total - expected) <= Decimal("0.01")

    def test_invalid_tax_rate_is_zero(self):
        totals = compute_totals(_items((1, 10)), "abc")
        assert totals.tax_amount == Decimal("0.00")
        assert totals.total == Decimal("10.00")


@pytest.mark.unit
class TestInputCoercion:
    """Non-numeric and negative inputs become zero."""

    @pytest.mark.parametrize("value", [None, "", "abc", "-5", -1, float("nan"), float("inf"), True])
    def test_invalid_becomes_zero(self, value):
        assert to_decimal(value) == Decimal("0")

    def test_string_numbers_parse(self):
        assert to_decimal(" 12.50 ") == Decimal("12.50")

    def test_quantity_truncates(self):
        assert to_quantity("2.9") == 2
        assert to_quantity("x") == 0

    def test_minor_units_round_half_up(self):
        assert to_minor_units("10.005") == 1001
        assert to_minor_units(5.5) == 550

    def test_item_coercion_on_invoice(self):
        """Garbage from the form never produces NaN totals."""
        invoice = Invoice(
            items=[{"description": "x", "quantity": "abc", "price": "-3"}],
            tax_rate="oops",
        )
        assert invoice.items[0].quantity == 0
        assert invoice.items[0].price == Decimal("0")
        assert invoice.total == Decimal("0.00")

    def test_supplied_totals_are_ignored(self):
        invoice = Invoice.model_validate({
            "items": [{"quantity": 1, "price": 10}],
            "subtotal": 999,
            "total": 999,
        })
        assert invoice.total == Decimal("10.00")
