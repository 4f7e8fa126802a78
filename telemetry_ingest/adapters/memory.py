"""In-memory event store."""
import asyncio
from typing import Any
import structlog
from .base import EventStore
from ..errors import KnownStoreError, UNIQUE_VIOLATION
from ..event_models import EventRecord, validate_record

log = structlog.get_logger()


class InMemoryEventStore(EventStore):
    """In-memory implementation of the event store, keyed by event id."""

    def __init__(self):
        self._events: dict[str, EventRecord] = {}
        self._lock = asyncio.Lock()

    async def create_event(self, record: dict[str, Any]) -> None:
        """Validate and store an event, rejecting duplicate ids."""
        event = validate_record(record)
        async with self._lock:
            if event.id in self._events:
                raise KnownStoreError(UNIQUE_VIOLATION, f"Unique constraint failed on id {event.id}")
            self._events[event.id] = event
        log.info(
            "event.stored",
            id=event.id,
            event_type=event.event_type,
            game=event.game_name,
            adapter="memory",
        )

    async def get(self, event_id: str) -> EventRecord | None:
        return self._events.get(event_id)

    def count(self) -> int:
        return len(self._events)

    async def health_check(self) -> bool:
        """In-memory store is always healthy."""
        return True
