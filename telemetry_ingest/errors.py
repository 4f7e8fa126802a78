"""Store error types and their classification."""
from enum import Enum


class StoreError(Exception):
    """Base class for failures the event store reports deliberately."""


class EventValidationError(StoreError):
    """The store refused the record because of its shape or field types."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class KnownStoreError(StoreError):
    """
    A store-level rejection that carries a short error code.

    Codes follow the ORM vocabulary the service has always reported
    to clients, e.g. ``P2002`` for a unique constraint violation.
    """

    def __init__(self, code: str, message: str = ""):
        super().__init__(message or f"Store error {code}")
        self.code = code
        self.message = message


# Known store error codes
UNIQUE_VIOLATION = "P2002"
VALUE_TOO_LONG = "P2000"
NULL_VIOLATION = "P2011"
FOREIGN_KEY_VIOLATION = "P2003"
CONSTRAINT_VIOLATION = "P2004"


class ErrorKind(str, Enum):
    """How the ingestion handler treats a failed store call."""

    VALIDATION = "validation"
    OPERATIONAL = "operational"
    UNKNOWN = "unknown"


def classify_error(exc: BaseException) -> ErrorKind:
    """Map an exception raised by the store onto an ErrorKind."""
    if isinstance(exc, EventValidationError):
        return ErrorKind.VALIDATION
    if isinstance(exc, KnownStoreError):
        return ErrorKind.OPERATIONAL
    return ErrorKind.UNKNOWN
