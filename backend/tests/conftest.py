"""
Shared fixtures for the Geolocate API tests
"""

import os

os.environ.setdefault("ENVIRONMENT", "testing")

from types import SimpleNamespace
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from geolocate.api.dependencies import get_analysis_invoker, get_image_ingest
from geolocate.database import Database
from geolocate.main import app, settings
from geolocate.models import GeolocationEvidence
from geolocate.services import AnalysisInvoker, ImageIngestService
from geolocate.utils.exceptions import StorageError


class FakeStorage:
    """In-memory stand-in for the object storage bucket"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.uploads: Dict[str, Any] = {}

    async def upload(self, key: str, data: bytes, content_type: str) -> None:
        if self.fail:
            raise StorageError(message="Failed to store image", bucket="test-bucket", key=key)
        self.uploads[key] = (data, content_type)

    def public_url(self, key: str) -> str:
        return f"https://storage.googleapis.com/test-bucket/{key}"


def make_evidence(**overrides: Any) -> GeolocationEvidence:
    """Build a provider answer for the Eiffel Tower"""
    data = {
        "coordinates": {"latitude": 48.8584, "longitude": 2.2945, "accuracy": 50},
        "location": {
            "country": "France",
            "region": "Île-de-France",
            "city": "Paris",
            "landmarks": ["Eiffel Tower"]
        },
        "confidence": 92,
        "reasoning": [
            "Wrought-iron lattice tower is recognisable",
            "Haussmann facades in the background"
        ],
        "visual_clues": {
            "architecture": ["Haussmann apartment blocks"],
            "signage": ["French street signs"],
            "weather": "overcast"
        }
    }
    data.update(overrides)
    return GeolocationEvidence.model_validate(data)


def make_openai_client(
    parsed: Optional[GeolocationEvidence] = None,
    refusal: Optional[str] = None,
    error: Optional[Exception] = None,
    api_key: str = "sk-test"
) -> MagicMock:
    """Fake AsyncOpenAI client whose parse() returns one canned completion"""
    client = MagicMock()
    client.api_key = api_key

    message = SimpleNamespace(parsed=parsed, refusal=refusal)
    completion = SimpleNamespace(choices=[SimpleNamespace(message=message)])
    client.chat.completions.parse = AsyncMock(return_value=completion, side_effect=error)
    return client


@pytest.fixture
def evidence_factory():
    return make_evidence


@pytest.fixture
def openai_client_factory():
    return make_openai_client


@pytest.fixture
def fake_storage():
    """Fake object storage"""
    return FakeStorage()


@pytest.fixture
def failing_storage():
    """Fake object storage whose uploads always fail"""
    return FakeStorage(fail=True)


@pytest.fixture
def openai_client():
    """Fake provider client answering with a valid result"""
    return make_openai_client(parsed=make_evidence())


@pytest.fixture
async def database(tmp_path):
    """Fresh SQLite database with the schema created"""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'history.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def client(tmp_path, monkeypatch, fake_storage, openai_client):
    """Test client over a temporary database, fake storage and a fake provider"""
    monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
    monkeypatch.setattr(settings, "openai_api_key", None)

    ingest = ImageIngestService(fake_storage)
    invoker = AnalysisInvoker(openai_client, model="gpt-4o")

    app.dependency_overrides[get_image_ingest] = lambda: ingest
    app.dependency_overrides[get_analysis_invoker] = lambda: invoker

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
