"""Shared test configuration."""
import os

# Settings are cached on first use, so these must be set before the app is imported
os.environ.setdefault("STORE_ADAPTER", "memory")
os.environ.setdefault("LOG_JSON", "false")

import pytest
from telemetry_ingest.adapters.memory import InMemoryEventStore


VALID_BODY = {
    "metaData": {
        "id": "abc",
        "eventType": "kill",
        "gameInfo": {"name": "Doom", "type": "FPS", "version": "1.0"},
        "timeStamp": "2024-01-01T00:00:00Z",
    },
    "eventPayload": {"enemy": "imp"},
}


def make_body(event_id: str, **meta_overrides) -> dict:
    """Build a well-formed request body with the given event id."""
    meta = dict(VALID_BODY["metaData"], id=event_id, **meta_overrides)
    return {"metaData": meta, "eventPayload": dict(VALID_BODY["eventPayload"])}


@pytest.fixture
def memory_store():
    return InMemoryEventStore()
