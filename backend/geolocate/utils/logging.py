"""
Structured logging for the Geolocate API
"""

import logging
import sys
from typing import Any, Dict, Optional

import structlog
from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "geolocate-api"

# Client libraries that log every HTTP round trip at INFO
QUIET_LOGGERS = (
    "google.auth",
    "google.cloud",
    "urllib3",
    "httpx",
    "openai",
    "aiosqlite",
    "sqlalchemy.engine",
)


def setup_logging(
    log_level: str = "info",
    log_format: str = "json",
    log_file: Optional[str] = None
) -> None:
    """
    Configure structlog on top of the standard library

    Args:
        log_level: debug, info, warning or error
        log_format: json for machine-readable lines, text for the console renderer
        log_file: Also write JSON records to this file
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter("%(message)s %(name)s %(levelname)s"))
        logging.getLogger().addHandler(file_handler)

    for name in ("uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).setLevel(logging.INFO)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class StructuredFormatter(JsonFormatter):
    """JSON records for the log file, tagged with the service name"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["service"] = SERVICE_NAME
        request_id = getattr(record, "request_id", None)
        if request_id:
            log_record["request_id"] = request_id


def log_analysis_event(
    logger: structlog.stdlib.BoundLogger,
    event: str,
    image_hash: str,
    **kwargs: Any
) -> None:
    """
    Log a step of an image analysis

    Args:
        logger: Bound logger of the caller
        event: Message
        image_hash: Content hash identifying the image across log lines
    """
    logger.info(event, image_hash=image_hash, event_type="analysis", **kwargs)


def log_service_event(
    logger: structlog.stdlib.BoundLogger,
    event: str,
    service_name: str,
    **kwargs: Any
) -> None:
    """Log a lifecycle event of a backing service"""
    logger.info(event, service_name=service_name, event_type="service", **kwargs)


def log_performance_event(
    logger: structlog.stdlib.BoundLogger,
    operation: str,
    duration_seconds: float,
    **kwargs: Any
) -> None:
    """Log how long an operation took, in milliseconds"""
    logger.info(
        "Operation timed",
        operation=operation,
        duration_ms=round(duration_seconds * 1000, 2),
        event_type="performance",
        **kwargs
    )
