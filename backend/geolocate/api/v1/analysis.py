"""
Analysis API endpoints
"""

import time

from fastapi import APIRouter, Depends
import structlog

from ...models.analysis import AnalysisRequest, GeolocationResult
from ...services import AnalysisInvoker, ImageIngestService, build_system_prompt
from ...utils.exceptions import GeolocateException
from ...utils.logging import log_analysis_event
from ...utils.metrics import record_analysis_completion
from ..dependencies import get_analysis_invoker, get_image_ingest

router = APIRouter()
logger = structlog.get_logger("api.analysis")


@router.post(
    "/analyze",
    response_model=GeolocationResult,
    response_model_exclude_none=True
)
async def analyze_image(
    analysis_request: AnalysisRequest,
    ingest: ImageIngestService = Depends(get_image_ingest),
    invoker: AnalysisInvoker = Depends(get_analysis_invoker)
) -> GeolocationResult:
    """
    Infer where an image was taken

    Nothing is persisted here; clients save results through POST /history.

    Args:
        analysis_request: Image reference and analysis options
        ingest: Image ingest service
        invoker: Structured generation invoker

    Returns:
        Geolocation result with metadata
    """
    started_at = time.perf_counter()
    analysis_type = analysis_request.analysis_type

    try:
        image = await ingest.ingest(
            image_url=analysis_request.image_url,
            image_data=analysis_request.image_data
        )

        log_analysis_event(
            logger,
            "Analysis request received",
            image.image_hash,
            analysis_type=analysis_type.value,
            uploaded=image.uploaded
        )

        system_prompt = build_system_prompt(
            analysis_type,
            analysis_request.include_confidence,
            analysis_request.include_reasoning_steps
        )

        result = await invoker.invoke(
            image_url=image.resolved_image_url,
            system_prompt=system_prompt,
            analysis_type=analysis_type,
            image_hash=image.image_hash,
            started_at=started_at
        )

    except GeolocateException as e:
        record_analysis_completion(e.error_code, analysis_type.value)
        raise

    record_analysis_completion("completed", analysis_type.value)
    log_analysis_event(
        logger,
        "Analysis completed",
        result.metadata.image_hash,
        analysis_type=analysis_type.value,
        country=result.location.country,
        confidence=result.confidence,
        processing_time_ms=result.metadata.processing_time
    )

    return result
