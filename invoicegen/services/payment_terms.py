# ==== PAYMENT TERMS SERVICE ==== #

"""
Toggle state machine for invoice payment terms.

Every method is either disabled (``None``) or enabled with defaults. Toggling
flips between the two and discards whatever was entered, so toggling twice
always returns to the starting presence state.
"""

from decimal import Decimal
from typing import List

from invoicegen.schemas.invoice import (
    BankTransferDetails,
    PaymentMethod,
    PaymentTerms,
    PayPalDetails,
)


def _enabled_default(method: PaymentMethod):
    """Populated default value used when a method is switched on."""
    if method is PaymentMethod.BANK_TRANSFER:
        return BankTransferDetails()
    if method is PaymentMethod.CREDIT_CARD:
        return []
    if method is PaymentMethod.PAYPAL:
        return PayPalDetails()
    return Decimal("0")


_FIELDS = {
    PaymentMethod.BANK_TRANSFER: "bank_transfer",
    PaymentMethod.CREDIT_CARD: "credit_card",
    PaymentMethod.PAYPAL: "paypal",
    PaymentMethod.LATE_FEE: "late_fee_percentage",
}


def is_enabled(terms: PaymentTerms, method: PaymentMethod) -> bool:
    return getattr(terms, _FIELDS[method]) is not None


def toggle_payment_method(terms: PaymentTerms, method: PaymentMethod) -> PaymentTerms:
    """
    Flip a payment method between disabled and enabled-with-defaults.

    Args:
        terms (PaymentTerms): Current terms, left untouched
        method (PaymentMethod): Section to toggle

    Returns:
        PaymentTerms: New terms with the section flipped
    """
    method = PaymentMethod(method)
    field = _FIELDS[method]
    value = None if is_enabled(terms, method) else _enabled_default(method)
    return terms.model_copy(update={field: value})


def toggle_card_brand(terms: PaymentTerms, brand: str) -> PaymentTerms:
    """
    Add or remove an accepted credit-card brand.

    Raises:
        ValueError: If credit cards are not enabled or the brand is blank
    """
    brand = brand.strip()
    if not brand:
        raise ValueError("Card brand must not be empty")
    if terms.credit_card is None:
        raise ValueError("Credit card payments are not enabled")

    if brand in terms.credit_card:
        brands = [b for b in terms.credit_card if b != brand]
    else:
        brands = [*terms.credit_card, brand]
    return terms.model_copy(update={"credit_card": brands})


def enabled_methods(terms: PaymentTerms) -> List[PaymentMethod]:
    """Sections an invoice preview must render, in display order."""
    return [method for method in PaymentMethod if is_enabled(terms, method)]


def preferred_payment_method(terms: PaymentTerms) -> str | None:
    """
    Pick the method to surface as a client's preference.

    Bank transfer wins over PayPal, which wins over the first accepted card
    brand. Late fees are not a payment method.
    """
    if terms.bank_transfer is not None:
        return PaymentMethod.BANK_TRANSFER.value
    if terms.paypal is not None:
        return PaymentMethod.PAYPAL.value
    if terms.credit_card:
        return terms.credit_card[0]
    return None
