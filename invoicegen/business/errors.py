"""Domain errors raised by InvoiceGen services and translated by the routers."""


class InvoiceGenError(Exception):
    """Base class for domain errors."""


class InvalidInvoiceError(InvoiceGenError):
    """Invoice payload is missing required data (e.g. has no line items)."""


class InvoiceNotFoundError(InvoiceGenError):
    """No invoice with this id exists for the requesting owner."""

    def __init__(self, invoice_id: str):
        super().__init__(f"Invoice {invoice_id} not found")
        self.invoice_id = invoice_id


class ClientNotFoundError(InvoiceGenError):
    """No client directory entry or invoice history matches the lookup."""

    def __init__(self, key: str):
        super().__init__(f"Client {key} not found")
        self.key = key


class CheckoutError(InvoiceGenError):
    """Checkout provider rejected or failed to create a session."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DuplicateClientError(InvoiceGenError):
    """A directory entry already exists for this email."""

    def __init__(self, email: str):
        super().__init__(f"Client {email} already exists")
        self.email = email
