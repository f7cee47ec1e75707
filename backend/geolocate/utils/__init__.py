"""
Utility modules for the Geolocate API
"""

from .logging import setup_logging
from .exceptions import (
    GeolocateException,
    InvalidArgumentError,
    ResourceExhaustedError,
    InternalError,
    ConfigurationError,
    StorageError,
    DatabaseError
)

__all__ = [
    "setup_logging",
    "GeolocateException",
    "InvalidArgumentError",
    "ResourceExhaustedError",
    "InternalError",
    "ConfigurationError",
    "StorageError",
    "DatabaseError"
]
