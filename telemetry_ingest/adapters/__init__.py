from .base import EventStore
from .memory import InMemoryEventStore
from .sql import SqlEventStore

__all__ = ["EventStore", "InMemoryEventStore", "SqlEventStore"]
