"""
Prometheus metrics for the telemetry ingest service.
"""
from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry
import psutil
import os


class Metrics:
    """
    Centralized metrics for the telemetry ingest service.
    """

    def __init__(self, service_name: str = "telemetry-ingest", version: str = "0.1.0", registry=None):
        self.service_name = service_name
        self.version = version
        self.registry = registry or CollectorRegistry()

        # HTTP Metrics
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["service", "method", "path", "status"],
            registry=self.registry,
        )

        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["service", "method", "path"],
            registry=self.registry,
        )

        self.http_requests_active = Gauge(
            "http_requests_active",
            "Number of active HTTP requests",
            ["service"],
            registry=self.registry,
        )
        self.http_requests_active.labels(service=service_name).set(0)

        # Application Info
        self.app_info = Info(
            "app",
            "Application information",
            registry=self.registry,
        )
        self.app_info.info({"service": service_name, "version": version})

        self.app_up = Gauge(
            "app_up",
            "Application up status (1=up, 0=down)",
            ["service", "version"],
            registry=self.registry,
        )
        self.app_up.labels(service=service_name, version=version).set(1)

        # Business Metrics - ingestion outcomes
        self.events_ingested_total = Counter(
            "telemetry_events_ingested_total",
            "Total telemetry events persisted",
            ["event_type"],
            registry=self.registry,
        )

        self.ingest_failures_total = Counter(
            "telemetry_ingest_failures_total",
            "Total rejected ingestion requests",
            ["reason"],
            registry=self.registry,
        )

        self.event_payload_bytes = Histogram(
            "telemetry_event_payload_bytes",
            "Ingested request body size in bytes",
            registry=self.registry,
        )

        # System Metrics
        self._setup_process_metrics()

    def _setup_process_metrics(self):
        """Set up process-level metrics using psutil."""
        self.process_memory_bytes = Gauge(
            "process_resident_memory_bytes",
            "Resident memory size in bytes",
            ["service"],
            registry=self.registry,
        )

        self.process_open_fds = Gauge(
            "process_open_fds",
            "Number of open file descriptors",
            ["service"],
            registry=self.registry,
        )

        self.update_system_metrics()

    def update_system_metrics(self):
        """Update system metrics from psutil."""
        try:
            process = psutil.Process(os.getpid())
            self.process_memory_bytes.labels(service=self.service_name).set(process.memory_info().rss)

            # num_fds() is not available on Windows
            if hasattr(process, "num_fds"):
                self.process_open_fds.labels(service=self.service_name).set(process.num_fds())
        except psutil.Error:
            pass

    def record_event_ingested(self, event_type: str | None):
        """Record a persisted event."""
        self.events_ingested_total.labels(event_type=event_type or "unknown").inc()

    def record_ingest_failure(self, reason: str):
        """Record a rejected ingestion request."""
        self.ingest_failures_total.labels(reason=reason).inc()

    def record_payload_size(self, size_bytes: int):
        self.event_payload_bytes.observe(size_bytes)
