"""
Structured logging configuration using structlog.

Standardized log format:
{
    "ts": "2026-10-19T04:30:00.123456Z",
    "level": "info",
    "service": "telemetry-ingest",
    "correlation_id": "uuid-v4",
    "event": "event.ingested",
    "module": "telemetry_ingest.handler",
    "function": "ingest",
    "line": 42,
    ...additional context...
}
"""
import structlog
import logging
from typing import Any

SERVICE_NAME = "telemetry-ingest"


def make_service_name_processor(service_name: str):
    """Build a processor that stamps the service name on every entry."""

    def add_service_name(logger: Any, method_name: str, event_dict: dict) -> dict:
        event_dict["service"] = service_name
        return event_dict

    return add_service_name


def setup_logging(json_output: bool = True, service_name: str = SERVICE_NAME, level: str = "INFO"):
    """
    Configure structured logging with standardized fields.

    Args:
        json_output: If True, output JSON logs. If False, use console format.
        service_name: Name of the service (for multi-service deployments).
        level: Minimum level name, e.g. "INFO" or "DEBUG".
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    shared_processors = [
        # Add contextvars (includes correlation_id from middleware)
        structlog.contextvars.merge_contextvars,
        make_service_name_processor(service_name),
        structlog.processors.TimeStamper(fmt="iso", key="ts"),
        structlog.processors.add_log_level,
        # Add module/function/line info
        structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors = shared_processors + [structlog.processors.JSONRenderer()]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging (SQLAlchemy, uvicorn) at the same level
    logging.basicConfig(
        format="%(message)s",
        level=log_level,
    )

    # Silence uvicorn's default logging to avoid duplicate logs
    logging.getLogger("uvicorn.error").handlers = []
    logging.getLogger("uvicorn.access").handlers = []


def get_logger():
    """Get a configured structlog logger."""
    return structlog.get_logger()
