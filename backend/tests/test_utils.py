"""
Tests for exceptions, logging helpers and metrics helpers
"""

import json
import logging

from prometheus_client import REGISTRY

from geolocate.api.middleware import metrics as middleware_metrics
from geolocate.api.middleware.metrics import get_endpoint_pattern
from geolocate.services import analysis_invoker
from geolocate.utils.metrics import record_analysis_completion, record_provider_call
from geolocate.utils.exceptions import (
    ConfigurationError,
    DatabaseError,
    GeolocateException,
    InternalError,
    InvalidArgumentError,
    ResourceExhaustedError,
    StorageError
)
from geolocate.utils.logging import StructuredFormatter


class TestExceptions:
    """Test the error taxonomy"""

    def test_status_codes(self):
        """Test each category maps to its HTTP status"""
        assert InvalidArgumentError().status_code == 400
        assert ResourceExhaustedError().status_code == 429
        assert InternalError().status_code == 500

    def test_internal_subclasses(self):
        """Test specialised internal errors keep their own codes"""
        for error, code in (
            (ConfigurationError(), "CONFIGURATION_ERROR"),
            (StorageError(), "STORAGE_ERROR"),
            (DatabaseError(), "DATABASE_ERROR"),
        ):
            assert isinstance(error, InternalError)
            assert error.status_code == 500
            assert error.error_code == code

    def test_to_dict(self):
        """Test serialisation of an error"""
        error = InvalidArgumentError("Bad image", field="imageData")
        data = error.to_dict()

        assert data["error_code"] == "INVALID_ARGUMENT"
        assert data["message"] == "Bad image"
        assert data["status_code"] == 400
        assert data["details"] == {"field": "imageData"}
        assert data["error_id"] == error.error_id
        assert isinstance(error, GeolocateException)


class TestStructuredFormatter:
    """Test the JSON log file formatter"""

    def test_adds_service_and_request_id(self):
        record = logging.LogRecord("api", logging.INFO, __file__, 1, "hello", None, None)
        record.request_id = "req-1"

        data = json.loads(StructuredFormatter("%(message)s").format(record))

        assert data["message"] == "hello"
        assert data["service"] == "geolocate-api"
        assert data["request_id"] == "req-1"


class TestAnalysisMetrics:
    """Test analysis and provider metrics"""

    def test_record_provider_call(self):
        labels = {"model": "metrics-test-model", "outcome": "success"}
        before = REGISTRY.get_sample_value("ai_provider_call_duration_seconds_count", labels) or 0

        record_provider_call("metrics-test-model", "success", 1.2)

        assert REGISTRY.get_sample_value("ai_provider_call_duration_seconds_count", labels) == before + 1

    def test_record_analysis_completion(self):
        labels = {"status": "completed", "analysis_type": "expert"}
        before = REGISTRY.get_sample_value("geolocation_analyses_total", labels) or 0

        record_analysis_completion("completed", "expert")

        assert REGISTRY.get_sample_value("geolocation_analyses_total", labels) == before + 1

    def test_services_do_not_import_the_http_layer(self):
        """Test the invoker records its metrics without the API package"""
        assert analysis_invoker.record_provider_call is record_provider_call
        assert not hasattr(middleware_metrics, "record_provider_call")


class TestEndpointPattern:
    """Test metric label normalisation"""

    def test_identifiers_are_collapsed(self):
        assert get_endpoint_pattern("/history") == "/history"
        assert get_endpoint_pattern("/history/123") == "/history/{id}"
        assert get_endpoint_pattern(
            "/history/0b6f4c6e-8d2b-4f6a-9a55-2a8a7f1f3c10"
        ) == "/history/{id}"
