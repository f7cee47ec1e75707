"""
Relational persistence for the Geolocate API
"""

from .base import Base, Database
from .models import AnalysisHistory

__all__ = [
    "Base",
    "Database",
    "AnalysisHistory"
]
