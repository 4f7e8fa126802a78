"""Correlation ID middleware for request tracing."""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
import uuid
from contextvars import ContextVar

# Context variable to store correlation ID across async context
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


class CorrelationMiddleware(BaseHTTPMiddleware):
    """
    Injects correlation ID into requests and logging context.

    - Extracts correlation ID from X-Correlation-ID header if present
    - Generates new UUID if not present
    - Binds correlation ID to structlog context
    - Adds correlation ID to response headers
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("x-correlation-id") or str(uuid.uuid4())

        correlation_id_var.set(correlation_id)
        request.state.correlation_id = correlation_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            http_method=request.method,
            http_path=request.url.path,
        )

        response = await call_next(request)

        response.headers["X-Correlation-ID"] = correlation_id

        return response


def get_correlation_id() -> str:
    """Get the current correlation ID from context."""
    return correlation_id_var.get()
