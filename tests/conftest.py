"""Shared fixtures"""
import os

# Keep test runs from writing rotating log files
os.environ.setdefault("LOG_TO_FILES", "false")

import pytest
from fastapi.testclient import TestClient

from backend.config import settings as backend_settings
from backend.core.storage import get_store
from config.settings import settings
from services.image_generation import registry


@pytest.fixture(autouse=True)
def no_provider_keys(monkeypatch):
    """Start every test in mock mode with an empty provider cache"""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("FAL_KEY", raising=False)
    monkeypatch.setattr(settings, "openai_api_key", "")
    monkeypatch.setattr(settings, "fal_key", "")
    registry._provider_cache.clear()
    yield
    registry._provider_cache.clear()


@pytest.fixture(autouse=True)
def fast_generation(monkeypatch):
    monkeypatch.setattr(backend_settings, "mock_generation_delay", 0)
    monkeypatch.setattr(backend_settings, "mock_fallback_on_error", True)


@pytest.fixture
def store():
    """The global store, emptied before and after the test"""
    s = get_store()
    s.reset()
    yield s
    s.reset()


@pytest.fixture
def seeded_store(store):
    store.seed_sample_data()
    return store


@pytest.fixture
def client(store):
    """API client over a freshly seeded store"""
    from backend.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def fal_key(monkeypatch):
    monkeypatch.setenv("FAL_KEY", "fal-test-key")
    return "fal-test-key"


@pytest.fixture
def openai_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-key")
    return "sk-test-key"


@pytest.fixture
def sample_project(client):
    """Detail view of the seeded "My First Video Project" """
    projects = client.get("/projects").json()
    project = next(p for p in projects if p["name"] == "My First Video Project")
    return client.get(f"/projects/{project['id']}").json()


@pytest.fixture
def sample_video(client, sample_project):
    """Detail view of the seeded "Product Demo" video (three frames)"""
    video = next(v for v in sample_project["videos"] if v["name"] == "Product Demo")
    return client.get(f"/videos/{video['id']}").json()
