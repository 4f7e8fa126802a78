from .correlation import CorrelationMiddleware, get_correlation_id
from .error_handler import ErrorHandlerMiddleware
from .metrics import MetricsMiddleware
from .validation import ValidationMiddleware

__all__ = [
    "CorrelationMiddleware",
    "ErrorHandlerMiddleware",
    "MetricsMiddleware",
    "ValidationMiddleware",
    "get_correlation_id",
]
