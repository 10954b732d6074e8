import pytest
from fastapi.testclient import TestClient

from backend.main import app, get_orchestrator


@pytest.fixture
def client(orchestrator):
    """API client wired to an orchestrator backed by the fake LLM."""
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
