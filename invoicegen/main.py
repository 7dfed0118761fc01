# ==== INVOICEGEN MAIN APPLICATION MODULE ==== #

"""
Main FastAPI application for InvoiceGen.

This module provides the core FastAPI application with middleware,
observability, and error handling for invoice authoring, the client
directory, dashboard statistics and the public invoice page.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from sqlalchemy import text

from invoicegen.business.errors import (
    CheckoutError,
    ClientNotFoundError,
    DuplicateClientError,
    InvalidInvoiceError,
    InvoiceNotFoundError,
)
from invoicegen.middleware.correlation import CorrelationMiddleware
from invoicegen.middleware.ownership import OwnershipMiddleware
from invoicegen.observability.logging import ContextualLogger, init_logging
from invoicegen.observability.metrics import init_metrics, metrics_router
from invoicegen.observability.tracing import init_tracing
from invoicegen.routes import accounts, checkout, clients, dashboard, invoices, public, reminders
from invoicegen.settings import settings
from invoicegen.storage.db import close_database, get_session, init_database


logger = ContextualLogger(__name__)


# ==== APPLICATION LIFECYCLE MANAGEMENT ==== #


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager for startup and shutdown operations.

    Args:
        app (FastAPI): FastAPI application instance

    Yields:
        None: Control back to FastAPI during application runtime
    """
    # --► STARTUP SEQUENCE
    init_logging(settings.LOG_LEVEL, settings.LOG_TO_FILES)
    init_tracing(settings.SERVICE_NAME)
    init_database()

    yield

    # --► SHUTDOWN SEQUENCE
    await close_database()


# ==== APPLICATION FACTORY ==== #


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    app = FastAPI(
        title="InvoiceGen",
        description="Invoice authoring, client directory and online payment collection",
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.APP_ENV == "dev" else None,
        redoc_url="/redoc" if settings.APP_ENV == "dev" else None
    )

    # --► OBSERVABILITY INITIALIZATION
    init_metrics(app)

    # --► MIDDLEWARE STACK CONFIGURATION
    # ⚠️ CORS middleware must be added FIRST before other middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.PUBLIC_BASE_URL, "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-Id"],
    )

    # Custom middleware added AFTER CORS
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(OwnershipMiddleware, require_owner=True)

    # --► HEALTH CHECK ENDPOINTS
    _register_health_endpoints(app)

    # --► APPLICATION INFO ENDPOINT
    _register_info_endpoint(app)

    # --► ROUTER REGISTRATION
    _register_routers(app)

    # --► EXCEPTION HANDLERS
    _register_exception_handlers(app)

    # --► OPENTELEMETRY INSTRUMENTATION
    FastAPIInstrumentor.instrument_app(app)

    return app


# ==== ENDPOINT REGISTRATION HELPERS ==== #


def _register_health_endpoints(app: FastAPI) -> None:
    """Register liveness and readiness probes."""
    @app.get("/healthz", tags=["health"])
    async def health_check() -> dict:
        return {
            "status": "ok",
            "service": settings.SERVICE_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    @app.get("/readyz", tags=["health"])
    async def readiness_check() -> dict:
        return {
            "status": "ready",
            "service": settings.SERVICE_NAME,
            "environment": settings.APP_ENV
        }


def _register_info_endpoint(app: FastAPI) -> None:
    """
    Register application information endpoint with dependency checks.

    Args:
        app (FastAPI): FastAPI application instance
    """
    @app.get("/info", tags=["info"])
    async def app_info() -> dict:
        """
        Service metadata plus document store and checkout provider status.

        Returns:
            dict: Application metadata and dependency status
        """
        # --► DATABASE STATUS CHECK
        database_status = "unknown"
        try:
            async with get_session() as db:
                await db.execute(text("SELECT 1"))
                database_status = "connected"
        except Exception as e:
            logger.warning("Database status check failed", error=str(e))
            database_status = "disconnected"

        return {
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "environment": settings.APP_ENV,
            "database_status": database_status,
            "checkout_provider": "enabled" if settings.STRIPE_SECRET_KEY else "disabled"
        }


def _register_routers(app: FastAPI) -> None:
    """
    Register all application routers with their prefixes and tags.

    Args:
        app (FastAPI): FastAPI application instance
    """
    app.include_router(metrics_router, prefix="", tags=["monitoring"])
    app.include_router(invoices.router, prefix="/api/invoices", tags=["invoices"])
    app.include_router(clients.router, prefix="/api/clients", tags=["clients"])
    app.include_router(accounts.router, prefix="/api/account", tags=["account"])
    app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
    app.include_router(reminders.router, prefix="/api/reminders", tags=["reminders"])
    app.include_router(checkout.router, prefix="/api", tags=["checkout"])
    app.include_router(public.router, prefix="/public", tags=["public"])


# ==== EXCEPTION HANDLERS ==== #


def _error_response(request: Request, status_code: int, error: str, message: str, code: str) -> JSONResponse:
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "detail": message,
            "message": message,
            "correlation_id": correlation_id,
            "code": code
        }
    )


def _register_exception_handlers(app: FastAPI) -> None:
    """
    Register handlers translating domain errors into HTTP responses.

    Args:
        app (FastAPI): FastAPI application instance
    """
    @app.exception_handler(InvoiceNotFoundError)
    @app.exception_handler(ClientNotFoundError)
    async def not_found_error_handler(request: Request, exc: Exception) -> JSONResponse:
        return _error_response(request, 404, "Not found", str(exc), "NOT_FOUND")

    @app.exception_handler(DuplicateClientError)
    async def duplicate_client_handler(request: Request, exc: DuplicateClientError) -> JSONResponse:
        return _error_response(request, 409, "Conflict", str(exc), "DUPLICATE_CLIENT")

    @app.exception_handler(InvalidInvoiceError)
    async def invalid_invoice_handler(request: Request, exc: InvalidInvoiceError) -> JSONResponse:
        return _error_response(request, 400, "Invalid invoice", str(exc), "INVALID_INVOICE")

    @app.exception_handler(CheckoutError)
    async def checkout_error_handler(request: Request, exc: CheckoutError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc) -> JSONResponse:
        """Unknown routes and ``HTTPException(404)`` raised by the routers."""
        detail = exc.detail if isinstance(exc, HTTPException) else None
        return _error_response(
            request,
            404,
            "Not found",
            detail or "The requested resource was not found",
            "NOT_FOUND",
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global exception handler for unhandled errors.

        Storage failures land here; no retry is attempted.
        """
        logger.exception("Unhandled error", path=request.url.path, error=str(exc))
        return _error_response(
            request, 500, "Internal server error", "An unexpected error occurred", "INTERNAL_ERROR"
        )


# ==== APPLICATION INSTANCE ==== #


# Create application instance for deployment
app = create_app()
