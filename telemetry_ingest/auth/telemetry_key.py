"""Telemetry key (pre-shared key) authentication."""
from typing import Any, Mapping
import structlog
from ..config import Settings, get_settings

log = structlog.get_logger()


def get_header(headers: Mapping[str, Any] | None, name: str) -> Any:
    """
    Look up a header value by name, ignoring case.

    Args:
        headers: Header mapping (plain dict or Starlette Headers)
        name: Header name in any case

    Returns:
        Header value, or None if absent
    """
    if not headers:
        return None
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


class TelemetryKeyRegistry:
    """
    Accepted telemetry keys.

    Keys come from the TELEMETRY_KEYS setting. They are only compared
    when ENFORCE_TELEMETRY_KEY is on; otherwise any non-empty key is
    accepted.
    """

    def __init__(self, settings: Settings | None = None):
        settings = settings or get_settings()
        self.header_name = settings.TELEMETRY_KEY_HEADER
        self.enforce = settings.ENFORCE_TELEMETRY_KEY
        self._keys: set[str] = set()
        self._load_keys(settings.TELEMETRY_KEYS)

    def _load_keys(self, raw: str):
        """Load keys from a comma-separated list."""
        for key in raw.split(","):
            key = key.strip()
            if key:
                self._keys.add(key)

        log.info("telemetry_keys.loaded", count=len(self._keys), enforce=self.enforce)
        if self.enforce and not self._keys:
            log.warning("telemetry_keys.enforced_without_keys")

    def validate(self, key: str) -> bool:
        return key in self._keys

    def authenticate(self, headers: Mapping[str, Any] | None) -> bool:
        """
        Decide whether a request carries an acceptable telemetry key.

        Args:
            headers: Request headers

        Returns:
            True if the request may proceed
        """
        key = get_header(headers, self.header_name)
        if not key:
            log.warning("auth.failed", reason="missing_key")
            return False

        if self.enforce and not self.validate(str(key)):
            log.warning("auth.failed", reason="invalid_key")
            return False

        log.debug("auth.success")
        return True
