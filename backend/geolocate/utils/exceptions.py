"""
Custom exceptions for the Geolocate API
"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4


class GeolocateException(Exception):
    """
    Base exception class for the Geolocate API
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow()
        self.error_id = str(uuid4())

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary

        Returns:
            Dictionary representation of the exception
        """
        return {
            "error_id": self.error_id,
            "error_code": self.error_code,
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details,
            "timestamp": self.timestamp.isoformat()
        }


class InvalidArgumentError(GeolocateException):
    """
    Malformed or missing input, unprocessable image, image rejected by the model
    """

    def __init__(
        self,
        message: str = "Invalid argument",
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        details = dict(details or {})
        if field:
            details["field"] = field

        super().__init__(
            message=message,
            error_code="INVALID_ARGUMENT",
            status_code=400,
            details=details
        )


class ResourceExhaustedError(GeolocateException):
    """
    Upstream quota or rate limit exceeded
    """

    def __init__(
        self,
        message: str = "Resource exhausted",
        resource_type: Optional[str] = None,
        original_error: Optional[str] = None
    ):
        details = {}
        if resource_type:
            details["resource_type"] = resource_type
        if original_error:
            details["original_error"] = original_error

        super().__init__(
            message=message,
            error_code="RESOURCE_EXHAUSTED",
            status_code=429,
            details=details
        )


class InternalError(GeolocateException):
    """
    Upstream model or service failure, or anything unclassified
    """

    def __init__(
        self,
        message: str = "Internal error",
        original_error: Optional[str] = None,
        error_code: str = "INTERNAL",
        details: Optional[Dict[str, Any]] = None
    ):
        details = dict(details or {})
        if original_error:
            details["original_error"] = original_error

        super().__init__(
            message=message,
            error_code=error_code,
            status_code=500,
            details=details
        )


class ConfigurationError(InternalError):
    """
    Exception for missing or invalid configuration, e.g. provider credentials
    """

    def __init__(
        self,
        message: str = "Configuration error",
        config_key: Optional[str] = None
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key

        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details=details
        )


class StorageError(InternalError):
    """
    Exception for object storage failures
    """

    def __init__(
        self,
        message: str = "Object storage error",
        bucket: Optional[str] = None,
        key: Optional[str] = None,
        original_error: Optional[str] = None
    ):
        details = {}
        if bucket:
            details["bucket"] = bucket
        if key:
            details["key"] = key

        super().__init__(
            message=message,
            original_error=original_error,
            error_code="STORAGE_ERROR",
            details=details
        )


class DatabaseError(InternalError):
    """
    Exception for database errors
    """

    def __init__(
        self,
        message: str = "Database error",
        operation: Optional[str] = None,
        table: Optional[str] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table

        super().__init__(
            message=message,
            error_code="DATABASE_ERROR",
            details=details
        )
