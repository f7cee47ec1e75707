"""
Analysis-related Pydantic models
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys on the wire"""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True
    }


class AnalysisType(str, Enum):
    """Analysis mode, selects prompt depth"""
    QUICK = "quick"
    DETAILED = "detailed"
    EXPERT = "expert"


class AnalysisRequest(CamelModel):
    """Analysis request model"""
    image_url: Optional[str] = Field(None, description="Public URL of the image")
    image_data: Optional[str] = Field(None, description="Base64 encoded image bytes")
    analysis_type: AnalysisType = Field(
        AnalysisType.DETAILED,
        description="Analysis mode"
    )
    include_confidence: bool = Field(
        True,
        description="Ask the model for an explicit confidence assessment"
    )
    include_reasoning_steps: bool = Field(
        True,
        description="Ask the model to document its reasoning"
    )


class Coordinates(CamelModel):
    """Estimated coordinates"""
    latitude: float = Field(..., ge=-90, le=90, description="Latitude (-90 to 90)")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude (-180 to 180)")
    accuracy: Optional[float] = Field(None, description="Accuracy radius in meters")


class Location(CamelModel):
    """Estimated place"""
    country: str = Field(..., description="Country name")
    region: Optional[str] = Field(None, description="State, province or region")
    city: Optional[str] = Field(None, description="City or town")
    address: Optional[str] = Field(None, description="Street address if identifiable")
    landmarks: Optional[List[str]] = Field(None, description="Recognised landmarks")


class VisualClues(CamelModel):
    """Evidence found in the image, grouped by category"""
    architecture: Optional[List[str]] = None
    vegetation: Optional[List[str]] = None
    signage: Optional[List[str]] = None
    vehicles: Optional[List[str]] = None
    infrastructure: Optional[List[str]] = None
    weather: Optional[str] = None
    time_of_day: Optional[str] = None
    cultural_indicators: Optional[List[str]] = None


class GeolocationEvidence(CamelModel):
    """Output schema requested from the model"""
    coordinates: Coordinates
    location: Location
    confidence: float = Field(..., ge=0, le=100, description="Confidence score (0-100)")
    reasoning: Optional[List[str]] = Field(None, description="Ordered reasoning steps")
    visual_clues: VisualClues


class AnalysisMetadata(CamelModel):
    """Locally computed analysis metadata"""
    analysis_type: AnalysisType
    processing_time: int = Field(..., ge=0, description="Processing time in milliseconds")
    image_hash: str = Field(..., description="SHA-256 hex digest")


class GeolocationResult(GeolocationEvidence):
    """Complete analysis result returned to the client"""
    metadata: AnalysisMetadata
