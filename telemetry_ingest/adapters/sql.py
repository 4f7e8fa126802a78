"""Relational event store backed by SQLAlchemy."""
import asyncio
from typing import Any
import structlog
from sqlalchemy import select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from .base import EventStore
from ..config import get_settings
from ..db import GameEvent, create_db_engine, init_db
from ..errors import (
    KnownStoreError,
    CONSTRAINT_VIOLATION,
    FOREIGN_KEY_VIOLATION,
    NULL_VIOLATION,
    UNIQUE_VIOLATION,
    VALUE_TOO_LONG,
)
from ..event_models import EventRecord, validate_record

log = structlog.get_logger()
settings = get_settings()

# PostgreSQL SQLSTATE codes
_PG_CODES = {
    "23505": UNIQUE_VIOLATION,
    "23502": NULL_VIOLATION,
    "23503": FOREIGN_KEY_VIOLATION,
    "23514": CONSTRAINT_VIOLATION,
    "22001": VALUE_TOO_LONG,
}

# SQLite reports constraint failures only through the message text
_SQLITE_MESSAGES = (
    ("UNIQUE constraint failed", UNIQUE_VIOLATION),
    ("NOT NULL constraint failed", NULL_VIOLATION),
    ("FOREIGN KEY constraint failed", FOREIGN_KEY_VIOLATION),
    ("CHECK constraint failed", CONSTRAINT_VIOLATION),
)


def known_error_code(exc: SQLAlchemyError) -> str | None:
    """
    Derive a known store error code from a driver exception.

    Returns:
        The error code, or None if the failure is not recognised
    """
    orig = getattr(exc, "orig", None)
    pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if pgcode in _PG_CODES:
        return _PG_CODES[pgcode]

    message = str(orig) if orig is not None else str(exc)
    for needle, code in _SQLITE_MESSAGES:
        if needle in message:
            return code

    if isinstance(exc, IntegrityError):
        return CONSTRAINT_VIOLATION
    return None


class SqlEventStore(EventStore):
    """
    SQLAlchemy implementation of the event store.

    Each event is one row in ``game_events``; the primary key on ``id``
    rejects duplicate submissions.
    """

    def __init__(self, database_url: str | None = None, engine: Engine | None = None):
        """
        Initialize the SQL store and create its table if missing.

        Args:
            database_url: Database URL (defaults to settings.DATABASE_URL)
            engine: Pre-built engine, takes precedence over database_url
        """
        self.database_url = database_url or settings.DATABASE_URL
        self._engine = engine or create_db_engine(self.database_url, echo=settings.DATABASE_ECHO)
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        init_db(self._engine)

    async def create_event(self, record: dict[str, Any]) -> None:
        """
        Insert one event row.

        Raises:
            EventValidationError: If the record is malformed
            KnownStoreError: If the database rejects the insert with a constraint error
            SQLAlchemyError: For any other database failure
        """
        event = validate_record(record)
        await asyncio.to_thread(self._insert, event)
        log.info(
            "event.stored",
            id=event.id,
            event_type=event.event_type,
            game=event.game_name,
            adapter="sql",
        )

    def _insert(self, event: EventRecord) -> None:
        row = GameEvent(
            id=event.id,
            event_type=event.event_type,
            timestamp=event.timestamp,
            game_name=event.game_name,
            game_type=event.game_type,
            game_version=event.game_version,
            payload=event.payload,
        )
        with self._session_factory() as session:
            try:
                session.add(row)
                session.commit()
            except (IntegrityError, DataError) as e:
                session.rollback()
                code = known_error_code(e)
                if code is None:
                    raise
                log.warning("sql.insert_rejected", id=event.id, code=code, error=str(e.orig))
                raise KnownStoreError(code, str(e.orig)) from e

    async def get(self, event_id: str) -> GameEvent | None:
        """Fetch a stored row by id."""
        return await asyncio.to_thread(self._get, event_id)

    def _get(self, event_id: str) -> GameEvent | None:
        with self._session_factory() as session:
            return session.scalars(select(GameEvent).where(GameEvent.id == event_id)).first()

    async def health_check(self) -> bool:
        """
        Check database connectivity.

        Returns:
            True if a trivial query succeeds, False otherwise
        """
        try:
            return await asyncio.to_thread(self._ping)
        except SQLAlchemyError as e:
            log.warning("sql.health_check_failed", error=str(e))
            return False

    def _ping(self) -> bool:
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def close(self) -> None:
        """Dispose of the connection pool."""
        self._engine.dispose()
