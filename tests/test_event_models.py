"""Tests for store-side event record validation."""
from datetime import datetime, timezone, timedelta
import pytest
from telemetry_ingest.errors import EventValidationError
from telemetry_ingest.event_models import validate_record


def _record(**overrides):
    record = {
        "id": "67845c8c-0e6a-4694-95df-37bc49e91f1b",
        "eventType": "kill",
        "timestamp": "2024-01-01T00:00:00Z",
        "gameName": "Doom",
        "gameType": "FPS",
        "gameVersion": "1.0",
        "payload": {"enemy": "imp"},
    }
    record.update(overrides)
    return record


def test_valid_record():
    event = validate_record(_record())
    assert event.id == "67845c8c-0e6a-4694-95df-37bc49e91f1b"
    assert event.event_type == "kill"
    assert event.game_name == "Doom"
    assert event.game_type == "FPS"
    assert event.game_version == "1.0"
    assert event.payload == {"enemy": "imp"}
    assert event.timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_timestamp_converted_to_utc():
    event = validate_record(_record(timestamp="2024-01-01T02:00:00+02:00"))
    assert event.timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert event.timestamp.utcoffset() == timedelta(0)


def test_naive_timestamp_taken_as_utc():
    event = validate_record(_record(timestamp=datetime(2024, 5, 1, 12, 30)))
    assert event.timestamp.tzinfo is timezone.utc
    assert event.timestamp.hour == 12


def test_payload_may_be_any_json_value():
    assert validate_record(_record(payload=[1, 2, 3])).payload == [1, 2, 3]
    assert validate_record(_record(payload="text")).payload == "text"


def test_all_fields_absent():
    record = {key: None for key in _record()}
    with pytest.raises(EventValidationError) as exc_info:
        validate_record(record)

    message = exc_info.value.message
    assert message.startswith("Invalid event record: ")
    for field in ("id", "eventType", "timestamp", "gameName", "gameType", "gameVersion", "payload"):
        assert field in message


def test_wrong_type_rejected():
    with pytest.raises(EventValidationError) as exc_info:
        validate_record(_record(gameVersion=1.0))
    assert "gameVersion" in exc_info.value.message


def test_bad_timestamp_rejected():
    with pytest.raises(EventValidationError) as exc_info:
        validate_record(_record(timestamp="yesterday"))
    assert "timestamp" in exc_info.value.message


def test_empty_id_left_to_the_database():
    assert validate_record(_record(id="")).id == ""


@pytest.mark.parametrize("value", [0, 1704067200, "1704067200", 1704067200.5, True, "", "2024-13-01T00:00:00Z"])
def test_numeric_timestamp_rejected(value):
    with pytest.raises(EventValidationError) as exc_info:
        validate_record(_record(timestamp=value))
    assert "timestamp" in exc_info.value.message


def test_iso_timestamp_variants_accepted():
    assert validate_record(_record(timestamp="2024-01-01T00:00:00z")).timestamp.year == 2024
    assert validate_record(_record(timestamp="2024-01-01T00:00:00.123456+00:00")).timestamp.microsecond == 123456
    assert validate_record(_record(timestamp="2024-01-01")).timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)
