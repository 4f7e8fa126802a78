"""Structured error response middleware."""
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
from .correlation import get_correlation_id

log = structlog.get_logger()


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turns exceptions that escape the routes into a generic 500 response."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            correlation_id = get_correlation_id()
            log.error(
                "unhandled.exception",
                error=str(exc),
                error_type=exc.__class__.__name__,
                path=request.url.path,
                exc_info=True,
            )
            return JSONResponse(
                status_code=500,
                content={
                    "errorMessage": "Internal server error",
                    "correlation_id": correlation_id,
                },
            )
