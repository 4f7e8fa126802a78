"""End-to-end tests for the ingestion route."""
import uuid
import orjson
from unittest.mock import AsyncMock
import pytest
from httpx import AsyncClient, ASGITransport
from telemetry_ingest.adapters.base import EventStore
from telemetry_ingest.adapters.memory import InMemoryEventStore
from telemetry_ingest.api.router import get_ingestion_handler
from telemetry_ingest.config import get_settings
from telemetry_ingest.errors import EventValidationError, KnownStoreError
from telemetry_ingest.handler import IngestionHandler
from telemetry_ingest.main import app
from .conftest import VALID_BODY, make_body

URL = "/api/telemetry/events"
settings = get_settings()


@pytest.fixture
def store():
    store = InMemoryEventStore()
    app.dependency_overrides[get_ingestion_handler] = lambda: IngestionHandler(store)
    yield store
    app.dependency_overrides.clear()


@pytest.fixture
def mock_store():
    store = AsyncMock(spec=EventStore)
    app.dependency_overrides[get_ingestion_handler] = lambda: IngestionHandler(store)
    yield store
    app.dependency_overrides.clear()


def _client():
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_ingest_event_returns_201(store):
    async with _client() as client:
        response = await client.post(URL, json=VALID_BODY, headers={"X-Telemetry-Key": "valid-key"})

    assert response.status_code == 201
    assert response.json() == {"status": "Event ingested"}
    stored = await store.get("abc")
    assert stored.game_name == "Doom"
    assert stored.payload == {"enemy": "imp"}


@pytest.mark.asyncio
async def test_missing_key_returns_401(mock_store):
    async with _client() as client:
        response = await client.post(URL, json=VALID_BODY)

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    mock_store.create_event.assert_not_awaited()


@pytest.mark.asyncio
async def test_empty_request_returns_401(mock_store):
    """No headers and no body at all."""
    async with _client() as client:
        response = await client.post(URL)

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    mock_store.create_event.assert_not_awaited()


@pytest.mark.asyncio
async def test_lowercase_header_is_accepted(store):
    async with _client() as client:
        response = await client.post(URL, json=make_body("lower"), headers={"x-telemetry-key": "k"})
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_incomplete_body_returns_400(store):
    async with _client() as client:
        response = await client.post(
            URL,
            json={"metaData": {"gameInfo": {}}},
            headers={"X-Telemetry-Key": "valid"},
        )

    assert response.status_code == 400
    message = response.json()["errorMessage"]
    assert message.startswith("Invalid event record")
    assert "gameName" in message


@pytest.mark.asyncio
async def test_store_validation_message_is_returned_verbatim(mock_store):
    mock_store.create_event.side_effect = EventValidationError("Incomplete data")
    async with _client() as client:
        response = await client.post(URL, json={}, headers={"X-Telemetry-Key": "valid"})

    assert response.status_code == 400
    assert response.json() == {"errorMessage": "Incomplete data"}


@pytest.mark.asyncio
async def test_duplicate_id_returns_database_error(store):
    event_id = str(uuid.uuid4())
    headers = {"X-Telemetry-Key": "valid-key"}
    async with _client() as client:
        first = await client.post(URL, json=make_body(event_id), headers=headers)
        second = await client.post(URL, json=make_body(event_id), headers=headers)

    assert first.status_code == 201
    assert second.status_code == 500
    assert second.json() == {"errorMessage": "Database error P2002"}


@pytest.mark.asyncio
async def test_known_store_error_code_is_reported(mock_store):
    mock_store.create_event.side_effect = KnownStoreError("P2000")
    async with _client() as client:
        response = await client.post(URL, json=VALID_BODY, headers={"X-Telemetry-Key": "k"})

    assert response.status_code == 500
    assert response.json() == {"errorMessage": "Database error P2000"}


@pytest.mark.asyncio
async def test_unexpected_store_failure_returns_generic_500(mock_store):
    mock_store.create_event.side_effect = ConnectionError("DB connection lost")
    async with _client() as client:
        response = await client.post(URL, json=VALID_BODY, headers={"X-Telemetry-Key": "k"})

    assert response.status_code == 500
    assert response.json() == {"errorMessage": "Internal server error"}


@pytest.mark.asyncio
async def test_invalid_json_rejected(mock_store):
    async with _client() as client:
        response = await client.post(
            URL,
            content=b"{invalid json}",
            headers={"Content-Type": "application/json", "X-Telemetry-Key": "k"},
        )

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidJSON"
    mock_store.create_event.assert_not_awaited()


@pytest.mark.asyncio
async def test_payload_too_large_rejected(mock_store):
    body = make_body("big")
    body["eventPayload"] = {"data": "x" * (settings.MAX_EVENT_SIZE + 1000)}
    async with _client() as client:
        response = await client.post(URL, json=body, headers={"X-Telemetry-Key": "k"})

    assert response.status_code == 413
    data = response.json()
    assert data["error"] == "PayloadTooLarge"
    assert data["max_size"] == settings.MAX_EVENT_SIZE
    mock_store.create_event.assert_not_awaited()


@pytest.mark.asyncio
async def test_non_json_body_is_passed_as_absent(store):
    async with _client() as client:
        response = await client.post(
            URL,
            content=b"not json",
            headers={"Content-Type": "text/plain", "X-Telemetry-Key": "k"},
        )

    assert response.status_code == 400
    assert response.json()["errorMessage"].startswith("Invalid event record")


@pytest.mark.asyncio
async def test_correlation_id_round_trip(store):
    async with _client() as client:
        response = await client.post(
            URL,
            json=make_body("corr"),
            headers={"X-Telemetry-Key": "k", "X-Correlation-ID": "test-correlation-123"},
        )

    assert response.status_code == 201
    assert response.headers["X-Correlation-ID"] == "test-correlation-123"


@pytest.mark.asyncio
async def test_default_handler_uses_configured_store():
    """Without overrides the app ingests through the process-wide store."""
    async with _client() as client:
        response = await client.post(
            URL,
            json=make_body(str(uuid.uuid4())),
            headers={"X-Telemetry-Key": "k"},
        )

    assert response.status_code == 201


@pytest.mark.asyncio
async def test_chunked_non_json_oversize_rejected(store):
    """Bodies without a content-length are measured as they arrive."""
    payload = orjson.dumps(
        {
            "metaData": dict(VALID_BODY["metaData"], id="chunked"),
            "eventPayload": {"data": "x" * (settings.MAX_EVENT_SIZE * 2)},
        }
    )

    async def chunks():
        for start in range(0, len(payload), 8192):
            yield payload[start:start + 8192]

    async with _client() as client:
        response = await client.post(
            URL,
            content=chunks(),
            headers={"Content-Type": "text/plain", "X-Telemetry-Key": "k"},
        )

    assert response.status_code == 413
    assert response.json()["error"] == "PayloadTooLarge"
    assert store.count() == 0


@pytest.mark.asyncio
async def test_json_event_sent_as_text_is_not_ingested(store):
    async with _client() as client:
        response = await client.post(
            URL,
            content=orjson.dumps(VALID_BODY),
            headers={"Content-Type": "text/plain", "X-Telemetry-Key": "k"},
        )

    assert response.status_code == 400
    assert response.json()["errorMessage"].startswith("Invalid event record")
    assert store.count() == 0


@pytest.mark.asyncio
async def test_epoch_timestamp_rejected_over_http(store):
    async with _client() as client:
        response = await client.post(
            URL,
            json=make_body("epoch-http", timeStamp=1704067200),
            headers={"X-Telemetry-Key": "k"},
        )

    assert response.status_code == 400
    assert "timestamp" in response.json()["errorMessage"]
