from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
import orjson
import structlog
from .schemas import IngestedResponse, UnauthorizedResponse, ErrorMessageResponse
from ..auth.telemetry_key import TelemetryKeyRegistry
from ..handler import IngestionHandler
from ..metrics import Metrics
from ..middleware.validation import is_json_request
from ..services.event_store import get_event_store

log = structlog.get_logger()

router = APIRouter(prefix="/api/telemetry", tags=["telemetry"])

_metrics: Metrics | None = None
_handler: IngestionHandler | None = None


def set_metrics(metrics: Metrics):
    """Set the metrics instance used by the ingestion handler."""
    global _metrics, _handler
    _metrics = metrics
    _handler = None


def reset_ingestion_handler():
    """Drop the shared handler so the next request binds the current store."""
    global _handler
    _handler = None


def get_ingestion_handler() -> IngestionHandler:
    """Dependency returning the shared ingestion handler."""
    global _handler
    if _handler is None:
        _handler = IngestionHandler(get_event_store(), TelemetryKeyRegistry(), metrics=_metrics)
    return _handler


@router.post(
    "/events",
    status_code=201,
    response_model=IngestedResponse,
    responses={
        400: {"model": ErrorMessageResponse},
        401: {"model": UnauthorizedResponse},
        500: {"model": ErrorMessageResponse},
    },
)
async def ingest_event(request: Request, handler: IngestionHandler = Depends(get_ingestion_handler)):
    raw = await request.body()
    if _metrics is not None:
        _metrics.record_payload_size(len(raw))

    # Only JSON bodies are read; the store validates their shape
    body = None
    if raw and is_json_request(request):
        try:
            body = orjson.loads(raw)
        except orjson.JSONDecodeError:
            log.debug("body.unparsed", size=len(raw))

    status_code, content = await handler.ingest(request.headers, body)
    return JSONResponse(status_code=status_code, content=content)
