"""
Relational tables
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class AnalysisHistory(Base):
    """One saved analysis. Rows are append-only."""

    __tablename__ = "analysis_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    image_hash: Mapped[str] = mapped_column(String(128), index=True)

    # {country, region?, city?, coordinates: {latitude, longitude}}
    location: Mapped[Dict[str, Any]] = mapped_column(JSON)

    confidence: Mapped[float] = mapped_column(Float)
    analysis_type: Mapped[str] = mapped_column(String(16))
    processing_time: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        index=True
    )

    def __repr__(self) -> str:
        return f"AnalysisHistory(id='{self.id}', analysis_type='{self.analysis_type}')"
