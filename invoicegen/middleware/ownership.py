# ==== OWNER SCOPING MIDDLEWARE ==== #

"""
Owner scoping middleware for InvoiceGen.

Authentication happens upstream; the gateway forwards the authenticated user
id in the ``X-Owner-Id`` header. This middleware validates the header and
injects the owner id into the request scope for the owner-scoped routes.
"""

from fastapi import Request
from starlette.types import ASGIApp, Scope, Receive, Send


OWNER_HEADER = b"x-owner-id"


# ==== UTILITY FUNCTIONS ==== #

def get_owner_id(request: Request) -> str:
    """
    Extract the owner id injected by ``OwnershipMiddleware``.

    Args:
        request (Request): FastAPI request object with owner context

    Returns:
        str: Owning user identifier
    """
    return request.scope["owner_id"]


# ==== OWNERSHIP MIDDLEWARE CLASS ==== #

class OwnershipMiddleware:
    """
    Middleware to extract and validate the owning user id.

    Public paths (health probes, metrics, docs, the public invoice view and
    checkout) are passed through without an owner.
    """

    def __init__(self, app: ASGIApp, require_owner: bool = True):
        self.app = app
        self.require_owner = require_owner

        # --► PATHS EXEMPT FROM OWNER VALIDATION
        self.exempt_paths = {
            "/healthz",
            "/readyz",
            "/info",
            "/metrics",
            "/docs",
            "/redoc",
            "/openapi.json",
            "/api/create-checkout-session",
        }
        self.exempt_prefixes = ("/public/",)

    def _is_exempt(self, path: str) -> bool:
        return path in self.exempt_paths or path.startswith(self.exempt_prefixes)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # ⚠️ Always allow OPTIONS requests (CORS preflight)
        if scope["method"] == "OPTIONS" or self._is_exempt(scope["path"]):
            await self.app(scope, receive, send)
            return

        # --► OWNER ID EXTRACTION FROM HEADERS
        headers = dict(scope["headers"])
        owner_id = headers.get(OWNER_HEADER)

        if self.require_owner and not owner_id:
            await self._send_error_response(send, 400, '{"detail":"Missing X-Owner-Id header"}')
            return

        if owner_id and not self._is_valid_owner_id(owner_id.decode()):
            await self._send_error_response(send, 400, '{"detail":"Invalid X-Owner-Id format"}')
            return

        scope["owner_id"] = owner_id.decode() if owner_id else "anonymous"

        await self.app(scope, receive, send)

    async def _send_error_response(self, send: Send, status: int, body: str) -> None:
        """Send an HTTP error response directly through ASGI."""
        await send({
            "type": "http.response.start",
            "status": status,
            "headers": [
                [b"content-type", b"application/json"],
            ],
        })
        await send({
            "type": "http.response.body",
            "body": body.encode(),
        })

    def _is_valid_owner_id(self, owner_id: str) -> bool:
        """Owner ids are 1-128 chars of letters, digits, hyphens and underscores."""
        if not owner_id or len(owner_id) > 128:
            return False
        return all(c.isalnum() or c in "-_" for c in owner_id)
