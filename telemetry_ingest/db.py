"""SQLAlchemy schema and engine helpers for the relational event store."""
from datetime import datetime, timezone
from sqlalchemy import JSON, DateTime, Index, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class GameEvent(Base):
    __tablename__ = "game_events"

    __table_args__ = (
        Index("ix_game_events_event_type", "event_type"),
        Index("ix_game_events_timestamp", "timestamp"),
        Index("ix_game_events_game", "game_name", "game_version"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    event_type: Mapped[str] = mapped_column(String(128), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    game_name: Mapped[str] = mapped_column(String(255), nullable=False)
    game_type: Mapped[str] = mapped_column(String(128), nullable=False)
    game_version: Mapped[str] = mapped_column(String(64), nullable=False)
    payload = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the configured database URL."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Inserts run on worker threads
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=echo, pool_pre_ping=True, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    """Create tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)
