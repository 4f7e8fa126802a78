"""Validation middleware for request payload size and JSON syntax."""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
import structlog
import orjson
from ..config import get_settings

log = structlog.get_logger()


def _too_large(size: int, max_size: int, path: str) -> JSONResponse:
    log.warning("payload.too_large", size=size, max_size=max_size, path=path)
    return JSONResponse(
        status_code=413,
        content={
            "error": "PayloadTooLarge",
            "message": f"Request payload exceeds maximum size of {max_size} bytes",
            "max_size": max_size,
            "received_size": size,
        },
    )


def is_json_request(request: Request) -> bool:
    """True when the request declares a JSON body."""
    return request.headers.get("content-type", "").startswith("application/json")


class ValidationMiddleware(BaseHTTPMiddleware):
    """
    Rejects oversized bodies of any content type, and JSON bodies that
    do not parse.

    The shape of the JSON is not checked here; that is left to the
    event store.
    """

    async def dispatch(self, request: Request, call_next):
        if request.method in ["POST", "PUT", "PATCH"]:
            max_size = get_settings().MAX_EVENT_SIZE

            # Check content-length header first
            content_length = request.headers.get("content-length")
            if content_length and content_length.isdigit() and int(content_length) > max_size:
                return _too_large(int(content_length), max_size, request.url.path)

            # Chunked bodies carry no content-length, so measure what arrives
            body = await request.body()
            if len(body) > max_size:
                return _too_large(len(body), max_size, request.url.path)

            if body and is_json_request(request):
                try:
                    orjson.loads(body)
                except orjson.JSONDecodeError as e:
                    log.warning("invalid.json", error=str(e), path=request.url.path)
                    return JSONResponse(
                        status_code=400,
                        content={
                            "error": "InvalidJSON",
                            "message": "Request body is not valid JSON",
                            "detail": str(e),
                        },
                    )

            # Re-create request with consumed body
            async def receive():
                return {"type": "http.request", "body": body, "more_body": False}

            request._receive = receive

        return await call_next(request)
