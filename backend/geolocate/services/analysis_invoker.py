"""
Structured-generation call that produces a geolocation result
"""

import time
from typing import Optional, Union

import openai
import structlog
from openai import AsyncOpenAI
from pydantic import ValidationError

from ..utils.metrics import record_provider_call
from ..models.analysis import (
    AnalysisMetadata,
    AnalysisType,
    GeolocationEvidence,
    GeolocationResult
)
from ..utils.exceptions import (
    ConfigurationError,
    GeolocateException,
    InternalError,
    InvalidArgumentError,
    ResourceExhaustedError
)
from .prompt_builder import USER_INSTRUCTION


_AUTH_MARKERS = (
    "api key", "api_key", "apikey", "authentication", "unauthorized",
    "invalid_api_key", "permission denied"
)
_QUOTA_MARKERS = (
    "quota", "rate limit", "rate_limit", "ratelimit", "too many requests"
)
_IMAGE_MARKERS = (
    "invalid", "unsupported", "not supported", "could not", "unable to",
    "download", "too large", "format"
)
_MODEL_MARKERS = (
    "not found", "does not exist", "unavailable", "not supported",
    "deprecated", "overloaded"
)


def create_openai_client(
    api_key: Optional[str],
    base_url: Optional[str] = None,
    max_retries: int = 2
) -> Optional[AsyncOpenAI]:
    """
    Build the provider client, or None when no credential is configured

    Args:
        api_key: OpenAI API key
        base_url: Optional API base URL (proxies, compatible providers)
        max_retries: Upstream retry budget for transient faults

    Returns:
        Configured client or None
    """
    if not api_key or not api_key.strip():
        return None
    return AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=max_retries)


def classify_provider_error(error: Exception) -> GeolocateException:
    """
    Map a provider failure onto the API error taxonomy

    Typed SDK errors are used where they exist; otherwise this falls back
    to best-effort matching on the error text.

    Args:
        error: Exception raised by the provider call

    Returns:
        Exception to raise to the caller
    """
    message = str(error)
    text = message.lower()

    if isinstance(error, ValidationError):
        return InternalError(
            message="AI provider returned output that does not match the result schema",
            original_error=message
        )

    if isinstance(error, openai.ContentFilterFinishReasonError):
        return InvalidArgumentError(
            message="The image was rejected by the AI model",
            details={"original_error": message}
        )

    # Status codes are only trusted from HTTP errors, never from the message text
    status_code = error.status_code if isinstance(error, openai.APIStatusError) else None

    if status_code in (401, 403):
        return InternalError(
            message="AI provider authentication failed",
            original_error=message
        )

    if status_code == 429:
        return ResourceExhaustedError(
            message="AI provider quota or rate limit exceeded",
            resource_type="ai_provider",
            original_error=message
        )

    if any(marker in text for marker in _AUTH_MARKERS):
        return InternalError(
            message="AI provider authentication failed",
            original_error=message
        )

    if any(marker in text for marker in _QUOTA_MARKERS):
        return ResourceExhaustedError(
            message="AI provider quota or rate limit exceeded",
            resource_type="ai_provider",
            original_error=message
        )

    if "model" in text and any(marker in text for marker in _MODEL_MARKERS):
        return InternalError(
            message="AI model is unavailable",
            original_error=message
        )

    if "image" in text and any(marker in text for marker in _IMAGE_MARKERS):
        return InvalidArgumentError(
            message="The image could not be processed by the AI model",
            details={"original_error": message}
        )

    return InternalError(
        message=f"Failed to analyze image: {message}",
        original_error=message
    )


class AnalysisInvoker:
    """
    Calls the multimodal model with a fixed output schema
    """

    def __init__(
        self,
        client: Optional[AsyncOpenAI],
        model: str = "gpt-4o",
        temperature: float = 0.1
    ):
        """
        Args:
            client: Provider client, None when no credential is configured
            model: Model name
            temperature: Sampling temperature, kept low for stable answers
        """
        self.client = client
        self.model = model
        self.temperature = temperature
        self.logger = structlog.get_logger("service.analysis_invoker")

    @property
    def is_configured(self) -> bool:
        return self.client is not None and bool(getattr(self.client, "api_key", None))

    async def invoke(
        self,
        image_url: str,
        system_prompt: str,
        analysis_type: Union[AnalysisType, str],
        image_hash: str,
        started_at: float
    ) -> GeolocationResult:
        """
        Run the analysis

        Args:
            image_url: URL of the image the model should read
            system_prompt: Prompt from build_system_prompt
            analysis_type: Mode recorded in the result metadata
            image_hash: Content hash recorded in the result metadata
            started_at: time.perf_counter() at the start of the request

        Returns:
            Validated result with metadata

        Raises:
            ConfigurationError: If no provider credential is configured
            InvalidArgumentError: If the model rejects the image
            ResourceExhaustedError: If the provider quota is exhausted
            InternalError: For any other provider failure
        """
        if not self.is_configured:
            raise ConfigurationError(
                message="AI provider API key is not configured",
                config_key="OPENAI_API_KEY"
            )

        call_started = time.perf_counter()

        try:
            completion = await self.client.chat.completions.parse(
                model=self.model,
                temperature=self.temperature,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": USER_INSTRUCTION},
                            {"type": "image_url", "image_url": {"url": image_url}}
                        ]
                    }
                ],
                response_format=GeolocationEvidence
            )
        except Exception as e:
            error = classify_provider_error(e)
            record_provider_call(self.model, error.error_code, time.perf_counter() - call_started)
            self.logger.warning(
                "Structured generation failed",
                image_hash=image_hash,
                error_code=error.error_code,
                error_type=type(e).__name__,
                error=str(e)
            )
            raise error from e

        record_provider_call(self.model, "success", time.perf_counter() - call_started)

        message = completion.choices[0].message
        evidence = message.parsed

        if evidence is None:
            if message.refusal:
                raise InvalidArgumentError(
                    message="The image was rejected by the AI model",
                    details={"refusal": message.refusal}
                )
            raise InternalError(message="AI provider returned no structured output")

        processing_time = int(round((time.perf_counter() - started_at) * 1000))

        result = GeolocationResult.model_validate({
            **evidence.model_dump(),
            "metadata": AnalysisMetadata(
                analysis_type=analysis_type,
                processing_time=processing_time,
                image_hash=image_hash
            )
        })

        self.logger.info(
            "Structured generation completed",
            image_hash=image_hash,
            model=self.model,
            country=result.location.country,
            confidence=result.confidence,
            processing_time_ms=processing_time
        )

        return result
