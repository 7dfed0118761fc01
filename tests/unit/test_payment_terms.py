"""Unit tests for the payment-terms toggle state machine."""

from decimal import Decimal

import pytest

from invoicegen.schemas.invoice import (
    BankTransferDetails,
    PaymentMethod,
    PaymentTerms,
    PayPalDetails,
)
from invoicegen.services.payment_terms import (
    enabled_methods,
    preferred_payment_method,
    toggle_card_brand,
    toggle_payment_method,
)


@pytest.mark.unit
class TestTogglePaymentMethod:

    def test_enable_bank_transfer_gives_empty_details(self):
        terms = toggle_payment_method(PaymentTerms(), PaymentMethod.BANK_TRANSFER)
        assert terms.bank_transfer == BankTransferDetails()

    def test_disable_discards_entered_values(self):
        terms = PaymentTerms(
            bank_transfer=BankTransferDetails(account_name="Acme", account_number="123")
        )
        terms = toggle_payment_method(terms, PaymentMethod.BANK_TRANSFER)
        assert terms.bank_transfer is None

        # Re-enabling starts blank again
        terms = toggle_payment_method(terms, PaymentMethod.BANK_TRANSFER)
        assert terms.bank_transfer.account_name == ""

    @pytest.mark.parametrize("method", list(PaymentMethod))
    def test_double_toggle_restores_presence(self, method):
        """Toggling twice returns to the original enabled state."""
        for start in (PaymentTerms(), toggle_payment_method(PaymentTerms(), method)):
            twice = toggle_payment_method(toggle_payment_method(start, method), method)
            assert (method in enabled_methods(twice)) == (method in enabled_methods(start))

    def test_enabled_defaults(self):
        terms = PaymentTerms()
        for method in PaymentMethod:
            terms = toggle_payment_method(terms, method)

        assert terms.credit_card == []
        assert terms.paypal == PayPalDetails()
        assert terms.late_fee_percentage == Decimal("0")
        assert enabled_methods(terms) == list(PaymentMethod)

    def test_toggle_does_not_mutate_input(self):
        terms = PaymentTerms()
        toggle_payment_method(terms, PaymentMethod.PAYPAL)
        assert terms.paypal is None


@pytest.mark.unit
class TestCardBrands:

    def test_toggle_brand_on_and_off(self):
        terms = PaymentTerms(credit_card=[])
        terms = toggle_card_brand(terms, "Visa")
        terms = toggle_card_brand(terms, "Mastercard")
        assert terms.credit_card == ["Visa", "Mastercard"]

        terms = toggle_card_brand(terms, "Visa")
        assert terms.credit_card == ["Mastercard"]

    def test_brand_requires_cards_enabled(self):
        with pytest.raises(ValueError):
            toggle_card_brand(PaymentTerms(), "Visa")

    def test_blank_brand_rejected(self):
        with pytest.raises(ValueError):
            toggle_card_brand(PaymentTerms(credit_card=[]), "  ")

    def test_legacy_empty_sentinel_normalized(self):
        """[''] loads as enabled with no brand chosen."""
        terms = PaymentTerms.model_validate({"credit_card": [""]})
        assert terms.credit_card == []
        assert PaymentMethod.CREDIT_CARD in enabled_methods(terms)

    def test_legacy_string_fields(self):
        terms = PaymentTerms.model_validate({"bank_transfer": "Acme Ltd", "paypal": "pay@acme.test"})
        assert terms.bank_transfer.account_name == "Acme Ltd"
        assert terms.paypal.email == "pay@acme.test"


@pytest.mark.unit
class TestPreferredPaymentMethod:

    def test_bank_wins(self):
        terms = PaymentTerms(
            bank_transfer=BankTransferDetails(),
            paypal=PayPalDetails(),
            credit_card=["Visa"],
        )
        assert preferred_payment_method(terms) == "bank_transfer"

    def test_paypal_before_cards(self):
        terms = PaymentTerms(paypal=PayPalDetails(), credit_card=["Visa"])
        assert preferred_payment_method(terms) == "paypal"

    def test_first_card_brand(self):
        assert preferred_payment_method(PaymentTerms(credit_card=["Amex", "Visa"])) == "Amex"

    def test_nothing_enabled(self):
        assert preferred_payment_method(PaymentTerms(credit_card=[])) is None
