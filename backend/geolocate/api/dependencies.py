"""
FastAPI dependencies resolving services from application state
"""

from typing import Any

from fastapi import HTTPException, Request

from ..services import AnalysisInvoker, HistoryStore, ImageIngestService, StatsAggregator


def _get_service(request: Request, name: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=503,
            detail=f"Service '{name}' not available"
        )
    return service


def get_image_ingest(request: Request) -> ImageIngestService:
    """Get image ingest service from app state"""
    return _get_service(request, "image_ingest")


def get_analysis_invoker(request: Request) -> AnalysisInvoker:
    """Get analysis invoker from app state"""
    return _get_service(request, "analysis_invoker")


def get_history_store(request: Request) -> HistoryStore:
    """Get history store from app state"""
    return _get_service(request, "history_store")


def get_stats_aggregator(request: Request) -> StatsAggregator:
    """Get statistics aggregator from app state"""
    return _get_service(request, "stats_aggregator")
