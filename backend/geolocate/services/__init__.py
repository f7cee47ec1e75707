"""
Services for the Geolocate API
"""

from .storage import StorageService
from .image_ingest import ImageIngestService, IngestedImage
from .prompt_builder import build_system_prompt
from .analysis_invoker import AnalysisInvoker, classify_provider_error, create_openai_client
from .history_store import HistoryStore
from .stats_aggregator import StatsAggregator

__all__ = [
    "StorageService",
    "ImageIngestService",
    "IngestedImage",
    "build_system_prompt",
    "AnalysisInvoker",
    "classify_provider_error",
    "create_openai_client",
    "HistoryStore",
    "StatsAggregator"
]
