"""
History API endpoints
"""

from fastapi import APIRouter, Depends, Query
import structlog

from ...config import settings
from ...models.history import HistoryResponse, SaveAnalysisRequest, SaveAnalysisResponse
from ...services import HistoryStore
from ..dependencies import get_history_store

router = APIRouter()
logger = structlog.get_logger("api.history")


@router.get("/history", response_model=HistoryResponse)
async def get_analysis_history(
    limit: int = Query(
        settings.history_default_limit,
        ge=1,
        le=settings.history_max_limit,
        description="Number of results"
    ),
    offset: int = Query(0, ge=0, description="Offset for pagination"),
    store: HistoryStore = Depends(get_history_store)
) -> HistoryResponse:
    """
    Get saved analyses, newest first

    Args:
        limit: Number of results to return
        offset: Offset for pagination
        store: History store

    Returns:
        Page of analyses and the total count
    """
    analyses, total = await store.list(limit=limit, offset=offset)

    logger.info(
        "History retrieved",
        count=len(analyses),
        total=total,
        offset=offset,
        limit=limit
    )

    return HistoryResponse(analyses=analyses, total=total)


@router.post("/history", response_model=SaveAnalysisResponse)
async def save_analysis(
    save_request: SaveAnalysisRequest,
    store: HistoryStore = Depends(get_history_store)
) -> SaveAnalysisResponse:
    """
    Save an analysis to the history

    Args:
        save_request: Result projection chosen by the client
        store: History store

    Returns:
        ID of the saved entry
    """
    analysis_id = await store.save(
        image_hash=save_request.image_hash,
        location=save_request.location.model_dump(exclude_none=True),
        confidence=save_request.confidence,
        analysis_type=save_request.analysis_type,
        processing_time=save_request.processing_time
    )

    return SaveAnalysisResponse(id=analysis_id)
