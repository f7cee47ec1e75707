"""
API middleware modules
"""

from .logging import LoggingMiddleware
from .metrics import MetricsMiddleware

__all__ = [
    "LoggingMiddleware",
    "MetricsMiddleware"
]
