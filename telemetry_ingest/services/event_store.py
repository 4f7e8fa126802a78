"""Event store selection and the shared store instance."""
import structlog
from ..adapters.base import EventStore
from ..adapters.memory import InMemoryEventStore
from ..adapters.sql import SqlEventStore
from ..config import get_settings

log = structlog.get_logger()

_store: EventStore | None = None


def create_default_store() -> EventStore:
    """
    Create the store selected by the STORE_ADAPTER setting.

    Returns:
        EventStore instance based on STORE_ADAPTER
    """
    settings = get_settings()
    if settings.STORE_ADAPTER == "memory":
        log.info("store.selected", type="memory")
        return InMemoryEventStore()

    log.info("store.selected", type="sql", dialect=settings.DATABASE_URL.split(":", 1)[0])
    return SqlEventStore(settings.DATABASE_URL)


def get_event_store() -> EventStore:
    """Return the process-wide store, creating it on first use."""
    global _store
    if _store is None:
        _store = create_default_store()
    return _store


def close_event_store() -> None:
    """Close and forget the process-wide store."""
    global _store
    if _store is not None:
        _store.close()
        _store = None
