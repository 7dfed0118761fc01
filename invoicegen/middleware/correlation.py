# ==== CORRELATION ID MIDDLEWARE ==== #

"""
Correlation ID middleware for request tracing in InvoiceGen.

Propagates or generates ``X-Correlation-Id``, wraps each request in a span
and records request latency.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from invoicegen.observability.metrics import http_request_latency_seconds
from invoicegen.observability.tracing import get_tracer


tracer = get_tracer(__name__)


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Adds correlation IDs to requests and responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get("X-Correlation-Id", str(uuid.uuid4()))
        request.state.correlation_id = correlation_id

        start_time = time.perf_counter()

        with tracer.start_as_current_span("http_request") as span:
            span.set_attribute("http.method", request.method)
            span.set_attribute("http.url", str(request.url))
            span.set_attribute("correlation_id", correlation_id)

            response = await call_next(request)
            response.headers["X-Correlation-Id"] = correlation_id

            # Label by route template to keep metric cardinality bounded
            route = request.scope.get("route")
            route_path = getattr(route, "path", "unmatched")

            http_request_latency_seconds.labels(
                method=request.method,
                route=route_path,
                status_code=str(response.status_code),
            ).observe(time.perf_counter() - start_time)

            span.set_attribute("http.status_code", response.status_code)
            return response
