from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictStr, ValidationError, field_validator
from typing import Annotated, Any
from datetime import datetime, timezone
from .errors import EventValidationError


def parse_iso_timestamp(v: Any) -> datetime:
    """
    Accept a datetime or an ISO-8601 string, nothing else.

    Epoch numbers and numeric strings are rejected rather than read as
    seconds since 1970.
    """
    if isinstance(v, datetime):
        return v
    if not isinstance(v, str):
        raise ValueError("timestamp must be an ISO-8601 date/time string")
    text = v.strip()
    if not text or text.isdigit():
        raise ValueError(f"timestamp {v!r} is not an ISO-8601 date/time")
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"timestamp {v!r} is not an ISO-8601 date/time") from None


IsoTimestamp = Annotated[datetime, BeforeValidator(parse_iso_timestamp)]


class EventRecord(BaseModel):
    """
    A telemetry event as the store accepts it.

    Field names follow the wire vocabulary (camelCase); the store maps
    them onto its own columns.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: StrictStr = Field(..., description="Client-supplied unique identifier")
    event_type: StrictStr = Field(..., alias="eventType")
    timestamp: IsoTimestamp = Field(..., description="Client-side UTC time of the event")
    game_name: StrictStr = Field(..., alias="gameName")
    game_type: StrictStr = Field(..., alias="gameType")
    game_version: StrictStr = Field(..., alias="gameVersion")
    payload: Any = Field(..., description="Opaque JSON payload")

    @field_validator("timestamp")
    @classmethod
    def _timestamp_as_utc(cls, v: datetime) -> datetime:
        # Naive timestamps are taken to already be UTC
        if v.tzinfo is None or v.utcoffset() is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @field_validator("payload")
    @classmethod
    def _payload_present(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("payload is required")
        return v


def describe_validation_error(exc: ValidationError) -> str:
    """Render a pydantic ValidationError as a single readable line."""
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "record"
        parts.append(f"{field}: {err.get('msg', 'invalid value')}")
    return "Invalid event record: " + "; ".join(parts)


def validate_record(data: dict[str, Any]) -> EventRecord:
    """
    Validate a raw record built by the ingestion handler.

    Raises:
        EventValidationError: If a field is absent or has the wrong type
    """
    try:
        return EventRecord.model_validate(data)
    except ValidationError as e:
        raise EventValidationError(describe_validation_error(e)) from e
