"""Base interface for event store backends."""
from abc import ABC, abstractmethod
from typing import Any


class EventStore(ABC):
    """Abstract interface for event persistence implementations."""

    @abstractmethod
    async def create_event(self, record: dict[str, Any]) -> None:
        """
        Persist one telemetry event.

        Args:
            record: Raw event fields (id, eventType, timestamp, gameName,
                gameType, gameVersion, payload). Absent values are None.

        Raises:
            EventValidationError: If the record is malformed or incomplete
            KnownStoreError: If the store rejects the write with an error code
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the backend is healthy and accessible.

        Returns:
            True if backend is healthy, False otherwise
        """
        pass

    def close(self) -> None:
        """Release backend resources."""
