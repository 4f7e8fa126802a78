from .telemetry_key import TelemetryKeyRegistry, get_header

__all__ = ["TelemetryKeyRegistry", "get_header"]
