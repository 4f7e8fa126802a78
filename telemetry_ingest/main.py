"""
Telemetry Ingest - game client event ingestion service.

Features:
- POST /api/telemetry/events authenticated by X-Telemetry-Key
- Relational persistence through SQLAlchemy
- Structured logging with correlation IDs
- Prometheus metrics
- Health checks (liveness and readiness)
"""
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from . import __version__
from .config import get_settings
from .logging import setup_logging, get_logger, SERVICE_NAME
from .api.router import router, set_metrics, reset_ingestion_handler
from .middleware import CorrelationMiddleware, ErrorHandlerMiddleware, MetricsMiddleware, ValidationMiddleware
from .metrics import Metrics
from .health import HealthChecker
from .services.event_store import get_event_store, close_event_store

# Initialize configuration
settings = get_settings()

# Setup logging
setup_logging(json_output=settings.LOG_JSON, service_name=SERVICE_NAME, level=settings.LOG_LEVEL)
logger = get_logger()

# Initialize metrics
metrics = Metrics(service_name=SERVICE_NAME, version=__version__)
set_metrics(metrics)

# Initialize health checker
health_checker = HealthChecker(get_event_store, service_name=SERVICE_NAME, version=__version__)

# Create FastAPI app
app = FastAPI(
    title="Telemetry Ingest",
    version=__version__,
    description="Game telemetry event ingestion service",
)

# Middleware added last runs first: correlation ID, metrics, errors, validation
app.add_middleware(ValidationMiddleware)
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(MetricsMiddleware, metrics=metrics)
app.add_middleware(CorrelationMiddleware)

# Include API routes
app.include_router(router)

# Mount Prometheus metrics endpoint
metrics_app = make_asgi_app(registry=metrics.registry)
app.mount("/metrics", metrics_app)


@app.get("/health")
async def health():
    """
    Liveness probe - basic health check.

    Returns 200 if service is running.
    """
    logger.debug("health_check_liveness")
    return health_checker.liveness()


@app.get("/health/ready")
async def health_ready():
    """
    Readiness probe - comprehensive health check.

    Returns:
        200: Service is ready to handle traffic
        503: Service is not ready
    """
    logger.debug("health_check_readiness")
    metrics.update_system_metrics()
    result = await health_checker.readiness()
    status_code = 200 if result["status"] == "ready" else 503
    return JSONResponse(status_code=status_code, content=result)


@app.on_event("startup")
async def startup_event():
    """Log service startup and open the event store."""
    store = get_event_store()
    logger.info(
        "service_starting",
        version=__version__,
        env=settings.ENV,
        store=type(store).__name__,
        enforce_telemetry_key=settings.ENFORCE_TELEMETRY_KEY,
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Log service shutdown and release the event store."""
    logger.info("service_stopping")
    metrics.app_up.labels(service=SERVICE_NAME, version=__version__).set(0)
    close_event_store()
    reset_ingestion_handler()


def run():
    """Run the service with uvicorn."""
    import uvicorn

    uvicorn.run(
        "telemetry_ingest.main:app",
        host="0.0.0.0",
        port=settings.SERVICE_PORT,
    )


if __name__ == "__main__":
    run()
