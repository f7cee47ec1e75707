"""
Tests for the structured generation invoker
"""

import time

import httpx
import openai
import pytest
from pydantic import ValidationError

from geolocate.models import AnalysisType, GeolocationEvidence, GeolocationResult
from geolocate.services.analysis_invoker import (
    AnalysisInvoker,
    classify_provider_error,
    create_openai_client
)
from geolocate.services.prompt_builder import USER_INSTRUCTION
from geolocate.utils.exceptions import (
    ConfigurationError,
    InternalError,
    InvalidArgumentError,
    ResourceExhaustedError
)


IMAGE_URL = "https://example.com/eiffel.jpg"
IMAGE_HASH = "a" * 64


def api_response(status_code: int) -> httpx.Response:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return httpx.Response(status_code, request=request)


def schema_error() -> ValidationError:
    try:
        GeolocationEvidence.model_validate({
            "coordinates": {"latitude": 120, "longitude": 0},
            "location": {"country": "Nowhere"},
            "confidence": 150,
            "visual_clues": {}
        })
    except ValidationError as e:
        return e
    raise AssertionError("expected a validation error")


async def run(invoker: AnalysisInvoker, analysis_type=AnalysisType.DETAILED, started_at=None):
    return await invoker.invoke(
        image_url=IMAGE_URL,
        system_prompt="system prompt",
        analysis_type=analysis_type,
        image_hash=IMAGE_HASH,
        started_at=started_at if started_at is not None else time.perf_counter()
    )


class TestCreateOpenAIClient:
    """Test provider client construction"""

    @pytest.mark.parametrize("api_key", [None, "", "   "])
    def test_missing_key(self, api_key):
        """Test no client is built without a credential"""
        assert create_openai_client(api_key) is None

    def test_retry_budget(self):
        """Test the client carries the retry budget"""
        client = create_openai_client("sk-test", max_retries=2)

        assert isinstance(client, openai.AsyncOpenAI)
        assert client.max_retries == 2


class TestClassifyProviderError:
    """Test provider error classification"""

    def test_schema_mismatch(self):
        """Test invalid model output is an internal error"""
        error = classify_provider_error(schema_error())

        assert isinstance(error, InternalError)
        assert error.error_code == "INTERNAL"

    def test_content_filter(self):
        """Test a content filter stop rejects the image"""
        error = classify_provider_error(openai.ContentFilterFinishReasonError())

        assert isinstance(error, InvalidArgumentError)

    def test_authentication_error(self):
        """Test SDK authentication errors are internal"""
        error = classify_provider_error(
            openai.AuthenticationError("Incorrect API key provided", response=api_response(401), body=None)
        )

        assert isinstance(error, InternalError)
        assert error.status_code == 500
        assert "authentication" in error.message

    def test_rate_limit_error(self):
        """Test SDK rate limit errors are resource exhaustion"""
        error = classify_provider_error(
            openai.RateLimitError("Rate limit reached", response=api_response(429), body=None)
        )

        assert isinstance(error, ResourceExhaustedError)
        assert error.status_code == 429
        assert error.details["resource_type"] == "ai_provider"

    @pytest.mark.parametrize("message,expected_type,expected_status", [
        ("Invalid API key provided", InternalError, 500),
        ("You exceeded your current quota, please check your plan", ResourceExhaustedError, 429),
        ("Too Many Requests", ResourceExhaustedError, 429),
        ("Invalid image: unable to download the file", InvalidArgumentError, 400),
        ("Image format not supported", InvalidArgumentError, 400),
        ("The model `gpt-9` does not exist", InternalError, 500),
    ])
    def test_text_matching(self, message, expected_type, expected_status):
        """Test untyped errors are classified by their text"""
        error = classify_provider_error(RuntimeError(message))

        assert isinstance(error, expected_type)
        assert error.status_code == expected_status

    @pytest.mark.parametrize("status_code,expected_type", [
        (401, InternalError),
        (403, InternalError),
        (429, ResourceExhaustedError),
    ])
    def test_status_codes(self, status_code, expected_type):
        """Test HTTP status codes classify errors whatever their text says"""
        error = classify_provider_error(
            openai.APIStatusError("upstream error", response=api_response(status_code), body=None)
        )

        assert isinstance(error, expected_type)

    def test_digits_in_message_are_not_status_codes(self):
        """Test numbers inside URLs or hashes do not look like auth or quota failures"""
        error = classify_provider_error(RuntimeError(
            "Error while downloading https://cdn.example.com/photos/14012.jpg: invalid image"
        ))

        assert isinstance(error, InvalidArgumentError)

        error = classify_provider_error(RuntimeError("Failed to fetch image 4291: could not decode"))

        assert isinstance(error, InvalidArgumentError)

    def test_model_failure_wins_over_image_failure(self):
        """Test a message naming both the model and the image is a model failure"""
        error = classify_provider_error(
            RuntimeError("The model gpt-4o-vision is unavailable, image not processed")
        )

        assert isinstance(error, InternalError)
        assert error.message == "AI model is unavailable"

    def test_model_unavailable_message(self):
        """Test unavailable models get a fixed message"""
        error = classify_provider_error(RuntimeError("model is overloaded"))

        assert error.message == "AI model is unavailable"

    def test_unclassified_keeps_original_message(self):
        """Test anything else is internal and keeps the provider message"""
        error = classify_provider_error(RuntimeError("connection reset by peer"))

        assert type(error) is InternalError
        assert error.message == "Failed to analyze image: connection reset by peer"
        assert error.details["original_error"] == "connection reset by peer"


class TestAnalysisInvoker:
    """Test AnalysisInvoker"""

    async def test_not_configured(self, openai_client_factory):
        """Test a missing credential fails before any network call"""
        with pytest.raises(ConfigurationError) as exc_info:
            await run(AnalysisInvoker(None))

        assert exc_info.value.error_code == "CONFIGURATION_ERROR"
        assert exc_info.value.status_code == 500

        client = openai_client_factory(api_key="")
        with pytest.raises(ConfigurationError):
            await run(AnalysisInvoker(client))

        client.chat.completions.parse.assert_not_awaited()

    async def test_success(self, openai_client, evidence_factory):
        """Test a valid answer is merged with locally computed metadata"""
        invoker = AnalysisInvoker(openai_client, model="gpt-4o", temperature=0.1)

        result = await run(invoker, analysis_type=AnalysisType.QUICK)

        assert isinstance(result, GeolocationResult)
        assert result.location.country == "France"
        assert result.coordinates.latitude == pytest.approx(48.8584)
        assert result.confidence == 92
        assert result.reasoning == evidence_factory().reasoning
        assert result.metadata.analysis_type == AnalysisType.QUICK
        assert result.metadata.image_hash == IMAGE_HASH
        assert result.metadata.processing_time >= 0

    async def test_request_shape(self, openai_client):
        """Test the model, prompt, image and schema sent to the provider"""
        invoker = AnalysisInvoker(openai_client, model="gpt-4o", temperature=0.1)

        await run(invoker)

        kwargs = openai_client.chat.completions.parse.await_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0.1
        assert kwargs["response_format"] is GeolocationEvidence

        system, user = kwargs["messages"]
        assert system == {"role": "system", "content": "system prompt"}
        assert user["role"] == "user"
        assert user["content"][0] == {"type": "text", "text": USER_INSTRUCTION}
        assert user["content"][1] == {"type": "image_url", "image_url": {"url": IMAGE_URL}}

    async def test_processing_time_counts_from_request_start(self, openai_client):
        """Test processing time is measured from the caller's start time"""
        invoker = AnalysisInvoker(openai_client)

        result = await run(invoker, started_at=time.perf_counter() - 1.5)

        assert result.metadata.processing_time >= 1500

    async def test_refusal(self, openai_client_factory):
        """Test a model refusal rejects the image"""
        invoker = AnalysisInvoker(openai_client_factory(parsed=None, refusal="I can't help with that"))

        with pytest.raises(InvalidArgumentError) as exc_info:
            await run(invoker)

        assert exc_info.value.details["refusal"] == "I can't help with that"

    async def test_missing_output(self, openai_client_factory):
        """Test an empty answer is an internal error"""
        invoker = AnalysisInvoker(openai_client_factory(parsed=None))

        with pytest.raises(InternalError):
            await run(invoker)

    async def test_provider_error_is_classified(self, openai_client_factory):
        """Test provider exceptions are mapped and chained"""
        cause = RuntimeError("You exceeded your current quota")
        invoker = AnalysisInvoker(openai_client_factory(error=cause))

        with pytest.raises(ResourceExhaustedError) as exc_info:
            await run(invoker)

        assert exc_info.value.__cause__ is cause

    async def test_schema_violation_never_reaches_caller(self, openai_client_factory):
        """Test out-of-range output from the provider is an internal error"""
        invoker = AnalysisInvoker(openai_client_factory(error=schema_error()))

        with pytest.raises(InternalError):
            await run(invoker)

    def test_is_configured(self, openai_client_factory):
        """Test credential detection"""
        assert AnalysisInvoker(None).is_configured is False
        assert AnalysisInvoker(openai_client_factory(api_key="")).is_configured is False
        assert AnalysisInvoker(openai_client_factory()).is_configured is True
