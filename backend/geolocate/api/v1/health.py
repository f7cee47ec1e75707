"""
Health check API endpoints
"""

import platform
from datetime import datetime
from typing import Dict, Any, Optional

import psutil
from fastapi import APIRouter, Request, HTTPException
import structlog

from ...config import settings
from ...database import Database

router = APIRouter()
logger = structlog.get_logger("api.health")


def _get_database(request: Request) -> Optional[Database]:
    return getattr(request.app.state, "database", None)


async def _database_health(request: Request) -> Dict[str, Any]:
    database = _get_database(request)
    if database is None:
        return {"status": "not_initialized"}

    try:
        return await database.health_check()
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}


def _provider_health(request: Request) -> Dict[str, Any]:
    invoker = getattr(request.app.state, "analysis_invoker", None)
    if invoker is None:
        return {"status": "not_initialized"}

    return {
        "status": "configured" if invoker.is_configured else "missing_credentials",
        "model": invoker.model
    }


@router.get("/health")
async def health_check(request: Request) -> Dict[str, Any]:
    """
    Basic health check endpoint

    Returns:
        Health status information
    """
    database_health = await _database_health(request)

    return {
        "status": "healthy" if database_health.get("status") == "healthy" else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "database": database_health
    }


@router.get("/health/detailed")
async def detailed_health_check(request: Request) -> Dict[str, Any]:
    """
    Detailed health check with component status

    Returns:
        Detailed health information
    """
    database_health = await _database_health(request)
    provider_health = _provider_health(request)

    health_data = {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "service": {
            "name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "debug": settings.debug
        },
        "components": {
            "database": database_health,
            "ai_provider": provider_health,
            "object_storage": {
                "status": "unknown",
                "bucket": settings.storage_bucket
            }
        }
    }

    if database_health.get("status") != "healthy" or provider_health.get("status") != "configured":
        health_data["status"] = "degraded"

    health_data["system"] = {
        "platform": platform.system(),
        "python_version": platform.python_version(),
        "cpu_count": psutil.cpu_count(),
        "memory_total_gb": round(psutil.virtual_memory().total / (1024**3), 2),
        "memory_available_gb": round(psutil.virtual_memory().available / (1024**3), 2),
        "disk_usage_percent": psutil.disk_usage('/').percent
    }

    return health_data


@router.get("/ready")
async def readiness_check(request: Request) -> Dict[str, Any]:
    """
    Readiness check for Kubernetes

    Returns:
        Readiness status
    """
    database_health = await _database_health(request)

    if database_health.get("status") != "healthy":
        raise HTTPException(
            status_code=503,
            detail="Database not ready"
        )

    return {
        "status": "ready",
        "timestamp": datetime.utcnow().isoformat(),
        "service": settings.app_name,
        "version": settings.app_version
    }


@router.get("/live")
async def liveness_check() -> Dict[str, Any]:
    """
    Liveness check for Kubernetes

    Returns:
        Liveness status
    """
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
        "service": settings.app_name,
        "version": settings.app_version
    }
