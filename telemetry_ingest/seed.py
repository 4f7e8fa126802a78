"""
Seed the event store with fixture events.

Usage:
    python -m telemetry_ingest.seed [--database-url URL]
"""
import argparse
import asyncio
import uuid
from datetime import datetime, timezone
from typing import Any
from .adapters.base import EventStore
from .adapters.sql import SqlEventStore
from .config import get_settings
from .logging import setup_logging, get_logger

logger = get_logger()

FIXTURES: list[dict[str, Any]] = [
    {
        "gameName": "Cyber Sprint",
        "gameType": "Racing",
        "gameVersion": "1.0.0",
        "eventType": "SESSION_START",
        "payload": {"map": "Neo-Tokyo", "players": 8},
    },
    {
        "gameName": "Cyber Sprint",
        "gameType": "Racing",
        "gameVersion": "1.0.0",
        "eventType": "LAP_COMPLETE",
        "payload": {"lapTime": 45.5, "player": "SpeedRacer"},
    },
]


async def seed(store: EventStore) -> list[dict[str, Any]]:
    """
    Insert every fixture event with a fresh id and the current time.

    Returns:
        The records that were created
    """
    created = []
    for fixture in FIXTURES:
        record = {
            "id": str(uuid.uuid4()),
            "timestamp": datetime.now(timezone.utc),
            **fixture,
        }
        await store.create_event(record)
        logger.info("seed.event_created", id=record["id"], event_type=record["eventType"])
        created.append(record)
    return created


def main(argv: list[str] | None = None):
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Seed the telemetry database with fixture events")
    parser.add_argument("--database-url", default=settings.DATABASE_URL)
    args = parser.parse_args(argv)

    setup_logging(json_output=settings.LOG_JSON, level=settings.LOG_LEVEL)
    logger.info("seed.starting", database=args.database_url.split(":", 1)[0])

    store = SqlEventStore(args.database_url)
    try:
        created = asyncio.run(seed(store))
    finally:
        store.close()

    logger.info("seed.finished", count=len(created))


if __name__ == "__main__":
    main()
