"""
History and statistics models
"""

from datetime import datetime
from typing import List, Optional
from pydantic import Field

from .analysis import AnalysisType, CamelModel


class HistoryCoordinates(CamelModel):
    """Coordinates snapshot stored with a history entry"""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class HistoryLocation(CamelModel):
    """Location snapshot stored with a history entry"""
    country: str = Field(..., min_length=1)
    region: Optional[str] = None
    city: Optional[str] = None
    coordinates: HistoryCoordinates


class SaveAnalysisRequest(CamelModel):
    """Body of POST /history"""
    image_hash: str = Field(..., min_length=1, max_length=128)
    location: HistoryLocation
    confidence: float = Field(..., ge=0, le=100)
    analysis_type: AnalysisType
    processing_time: int = Field(..., ge=0)


class SaveAnalysisResponse(CamelModel):
    """Identifier of the saved history entry"""
    id: str


class AnalysisHistoryItem(CamelModel):
    """Persisted analysis"""
    id: str
    image_hash: str
    location: HistoryLocation
    confidence: float
    analysis_type: str
    created_at: datetime
    processing_time: int


class HistoryResponse(CamelModel):
    """Page of history entries"""
    analyses: List[AnalysisHistoryItem]
    total: int


class CountryCount(CamelModel):
    country: str
    count: int


class AnalysisTypeCount(CamelModel):
    type: str
    count: int


class DailyActivity(CamelModel):
    date: str
    count: int


class StatsResponse(CamelModel):
    """Aggregate statistics over the history table"""
    total_analyses: int = 0
    average_confidence: int = 0
    average_processing_time: int = 0
    country_distribution: List[CountryCount] = Field(default_factory=list)
    analysis_type_distribution: List[AnalysisTypeCount] = Field(default_factory=list)
    recent_activity: List[DailyActivity] = Field(default_factory=list)
