"""
Statistics API endpoints
"""

from fastapi import APIRouter, Depends

from ...models.history import StatsResponse
from ...services import StatsAggregator
from ..dependencies import get_stats_aggregator

router = APIRouter()


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    aggregator: StatsAggregator = Depends(get_stats_aggregator)
) -> StatsResponse:
    """Analytics and statistics about saved analyses"""
    return await aggregator.get_stats()
