# ==== INVOICE TOTALS SERVICE ==== #

"""
Invoice totals computation for InvoiceGen.

Line totals, subtotal, tax and grand total are accumulated in ``Decimal`` and
only quantized to cents at the boundary. User input that is negative or not a
number is coerced to zero rather than poisoning the sums.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable


CENT = Decimal("0.01")
ZERO = Decimal("0")


# ==== INPUT COERCION ==== #


def to_decimal(value: Any) -> Decimal:
    """
    Coerce user input to a non-negative finite ``Decimal``.

    Strings are stripped and parsed, floats go through ``str`` to avoid
    binary artifacts. Anything unparsable, infinite, NaN or negative becomes 0.

    Args:
        value (Any): Raw field value from a form or JSON payload

    Returns:
        Decimal: Parsed value or ``Decimal(0)``
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        number = value
    else:
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return ZERO

    if not number.is_finite() or number < 0:
        return ZERO

    return number


def to_quantity(value: Any) -> int:
    """Coerce a quantity to a non-negative integer, truncating fractions."""
    return int(to_decimal(value))


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents, half up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(value: Any) -> int:
    """Convert a currency amount to integer cents, half up."""
    return int((to_decimal(value) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ==== TOTALS ==== #


@dataclass(frozen=True)
class InvoiceTotals:
    """Derived invoice amounts, already rounded to cents."""

    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


def line_total(item: Any) -> Decimal:
    """Unrounded ``quantity * price`` for a single line item."""
    return Decimal(to_quantity(item.quantity)) * to_decimal(item.price)


def compute_totals(items: Iterable[Any], tax_rate: Any) -> InvoiceTotals:
    """
    Compute subtotal, tax amount and total for a sequence of line items.

    Items only need ``quantity`` and ``price`` attributes. Sums are exact;
    each figure is rounded once when the result is built.

    Args:
        items (Iterable[Any]): Line items in invoice order
        tax_rate (Any): Tax rate in percent

    Returns:
        InvoiceTotals: Rounded subtotal, tax and total
    """
    subtotal = sum((line_total(item) for item in items), ZERO)
    tax_amount = subtotal * to_decimal(tax_rate) / Decimal(100)
    total = subtotal + tax_amount

    return InvoiceTotals(
        subtotal=quantize_money(subtotal),
        tax_amount=quantize_money(tax_amount),
        total=quantize_money(total),
    )
