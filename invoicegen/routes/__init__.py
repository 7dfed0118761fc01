# ==== ROUTES PACKAGE ==== #

"""
Routes package for API endpoints.

This package contains the FastAPI route modules for invoices, clients,
accounts, checkout, the public invoice view, dashboard statistics and
payment reminders.
"""
