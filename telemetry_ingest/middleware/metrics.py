"""HTTP metrics middleware."""
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
import structlog

log = structlog.get_logger()

UNMATCHED_PATH = "<unmatched>"


def route_path(request: Request) -> str:
    """
    Path label for a request: the matched route template.

    Unrouted paths share one label so scanners cannot grow the
    label set without bound.
    """
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_PATH


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Records Prometheus HTTP metrics per route template.

    The route is known only once routing has run, so labels are taken
    after the downstream call returns.
    """

    def __init__(self, app, metrics):
        super().__init__(app)
        self.metrics = metrics

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith("/metrics"):
            return await call_next(request)

        service = self.metrics.service_name
        active = self.metrics.http_requests_active.labels(service=service)
        active.inc()
        start_time = time.perf_counter()
        status = 500

        try:
            response = await call_next(request)
            status = response.status_code
            return response
        except Exception as e:
            log.error("http_request_error", error=str(e), error_type=type(e).__name__)
            raise
        finally:
            duration = time.perf_counter() - start_time
            path = route_path(request)
            self.metrics.http_requests_total.labels(
                service=service, method=request.method, path=path, status=status
            ).inc()
            self.metrics.http_request_duration.labels(
                service=service, method=request.method, path=path
            ).observe(duration)
            active.dec()
            log.info("http_request", http_status=status, route=path, duration_ms=round(duration * 1000, 2))
