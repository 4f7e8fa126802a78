"""
Telemetry event ingestion.

The handler authenticates a request by its telemetry key header, copies
the event fields out of the body and makes exactly one store call. It
does not validate the body itself: missing or malformed fields are
passed on as None or as received, and the store decides whether the
record is acceptable. Store failures are classified into a status code
and a response body:

- 201 {"status": "Event ingested"}
- 401 {"error": "Unauthorized"}
- 400 {"errorMessage": <store validation message>}
- 500 {"errorMessage": "Database error <code>"}
- 500 {"errorMessage": "Internal server error"}
"""
from typing import Any, Mapping
import structlog
from .adapters.base import EventStore
from .auth.telemetry_key import TelemetryKeyRegistry
from .errors import ErrorKind, EventValidationError, KnownStoreError, classify_error
from .metrics import Metrics

log = structlog.get_logger()

INGESTED = {"status": "Event ingested"}
UNAUTHORIZED = {"error": "Unauthorized"}
INTERNAL_ERROR = {"errorMessage": "Internal server error"}


def _field(obj: Any, name: str) -> Any:
    """Read a field from a JSON object, None when the object is not one."""
    if isinstance(obj, Mapping):
        return obj.get(name)
    return None


def build_event_record(body: Any) -> dict[str, Any]:
    """
    Map a request body onto the store's event fields.

    Args:
        body: Parsed JSON body, any shape

    Returns:
        Dict with id, eventType, timestamp, gameName, gameType,
        gameVersion and payload; absent values are None
    """
    meta_data = _field(body, "metaData")
    game_info = _field(meta_data, "gameInfo")
    return {
        "id": _field(meta_data, "id"),
        "eventType": _field(meta_data, "eventType"),
        "timestamp": _field(meta_data, "timeStamp"),
        "gameName": _field(game_info, "name"),
        "gameType": _field(game_info, "type"),
        "gameVersion": _field(game_info, "version"),
        "payload": _field(body, "eventPayload"),
    }


class IngestionHandler:
    """Stateless ingestion handler bound to one event store."""

    def __init__(
        self,
        store: EventStore,
        keys: TelemetryKeyRegistry | None = None,
        metrics: Metrics | None = None,
    ):
        self.store = store
        self.keys = keys or TelemetryKeyRegistry()
        self.metrics = metrics

    async def ingest(self, headers: Mapping[str, Any] | None, body: Any) -> tuple[int, dict[str, Any]]:
        """
        Ingest one telemetry event.

        Args:
            headers: Request headers
            body: Parsed JSON body

        Returns:
            (status_code, response_body)
        """
        if not self.keys.authenticate(headers):
            self._failure("unauthorized")
            return 401, dict(UNAUTHORIZED)

        record = build_event_record(body)

        try:
            await self.store.create_event(record)
        except Exception as exc:
            return self._error_response(exc, record)

        log.info(
            "event.ingested",
            id=record["id"],
            event_type=record["eventType"],
            game=record["gameName"],
        )
        if self.metrics is not None:
            self.metrics.record_event_ingested(record["eventType"])
        return 201, dict(INGESTED)

    def _error_response(self, exc: Exception, record: dict[str, Any]) -> tuple[int, dict[str, Any]]:
        kind = classify_error(exc)
        self._failure(kind.value)

        if kind is ErrorKind.VALIDATION and isinstance(exc, EventValidationError):
            log.warning("event.rejected", id=record["id"], kind=kind.value, error=exc.message)
            return 400, {"errorMessage": exc.message}

        if kind is ErrorKind.OPERATIONAL and isinstance(exc, KnownStoreError):
            log.warning("event.rejected", id=record["id"], kind=kind.value, code=exc.code)
            return 500, {"errorMessage": f"Database error {exc.code}"}

        log.error(
            "event.ingest_failed",
            id=record["id"],
            error=str(exc),
            error_type=exc.__class__.__name__,
            exc_info=exc,
        )
        return 500, dict(INTERNAL_ERROR)

    def _failure(self, reason: str):
        if self.metrics is not None:
            self.metrics.record_ingest_failure(reason)
