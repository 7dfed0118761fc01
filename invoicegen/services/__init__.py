# ==== SERVICES PACKAGE ==== #

"""
Services package for business logic and external integrations.

This package contains the invoice calculations, payment-terms editing,
client aggregation, dashboard listing and analytics, plus the checkout
provider client and PDF rendering for InvoiceGen.
"""
