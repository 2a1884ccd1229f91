"""
Pytest configuration and shared fixtures.
"""

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from stacksfinder_mcp.config import reset_settings
from stacksfinder_mcp.core.catalog import Catalog, load_catalog
from stacksfinder_mcp.core.clients.remote import RemoteClient

BASE_URL = "https://stacksfinder.test"
API_KEY = "sk_test_123"
JOB_ID = "job-1"
BLUEPRINT_ID = "9b2f1c3e-4d5a-4b6c-8d7e-0f1a2b3c4d5e"


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Every test starts without memoized settings."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def catalog() -> Catalog:
    """The bundled technology catalog."""
    return load_catalog()


@pytest.fixture
def blueprint_payload() -> Dict[str, Any]:
    """A blueprint as the API returns it."""
    return {
        "id": BLUEPRINT_ID,
        "projectId": "proj-1",
        "narrative": "A pragmatic TypeScript stack.",
        "selectedTechs": [
            {"category": "meta-framework", "technology": "nextjs"},
            {"category": "database", "technology": "postgres"},
        ],
        "createdAt": "2025-12-30T10:00:00Z",
        "projectContext": {"projectName": "Acme", "projectType": "saas", "scale": "mvp"},
    }


@pytest.fixture
def job_payload() -> Dict[str, Any]:
    """A freshly submitted blueprint job."""
    return {
        "jobId": JOB_ID,
        "projectId": "proj-1",
        "status": "pending",
        "progress": 0,
        "_links": {"job": f"/api/v1/jobs/{JOB_ID}"},
    }


class FakeClock:
    """Monotonic clock advanced only by the fake sleep."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


class Recorder:
    """Records every request a MockTransport handler sees."""

    def __init__(self):
        self.requests: List[httpx.Request] = []

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]

    def count(self, path: str) -> int:
        return self.paths().count(path)

    @staticmethod
    def body(request: httpx.Request) -> Dict[str, Any]:
        return json.loads(request.content)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def make_client(recorder) -> Callable[..., RemoteClient]:
    """Build a RemoteClient whose HTTP traffic goes to ``handler``."""

    def factory(handler, api_key=API_KEY, **kwargs) -> RemoteClient:
        async def recording(request: httpx.Request):
            recorder.requests.append(request)
            response = handler(request)
            if not isinstance(response, httpx.Response):
                response = await response
            return response

        return RemoteClient(BASE_URL, api_key, transport=httpx.MockTransport(recording), **kwargs)

    return factory
