"""
Pydantic models for the Geolocate API
"""

from .analysis import (
    AnalysisType,
    AnalysisRequest,
    Coordinates,
    Location,
    VisualClues,
    GeolocationEvidence,
    AnalysisMetadata,
    GeolocationResult
)

from .history import (
    HistoryLocation,
    SaveAnalysisRequest,
    SaveAnalysisResponse,
    AnalysisHistoryItem,
    HistoryResponse,
    StatsResponse
)

__all__ = [
    # Analysis models
    "AnalysisType",
    "AnalysisRequest",
    "Coordinates",
    "Location",
    "VisualClues",
    "GeolocationEvidence",
    "AnalysisMetadata",
    "GeolocationResult",

    # History models
    "HistoryLocation",
    "SaveAnalysisRequest",
    "SaveAnalysisResponse",
    "AnalysisHistoryItem",
    "HistoryResponse",
    "StatsResponse",
]
