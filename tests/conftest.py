import json
import os
import tempfile

os.environ.setdefault(
    "SYMPTOMRELAY_LOG_FILE", os.path.join(tempfile.gettempdir(), "symptomrelay-tests.log")
)

import httpx
import pytest
from fastapi.testclient import TestClient

from symptomrelay.api.main import create_app
from symptomrelay.api.routers.analysis import get_analysis_service
from symptomrelay.api.services.analysis_service import AnalysisService
from symptomrelay.config import Settings, get_settings
from symptomrelay.services.completion import OpenAICompletionClient
from symptomrelay.services.relay import SymptomAnalysisRelay
from symptomrelay.services.store import AnalysisStore

SCENARIO_OUTPUT = {
    "summary": "Likely viral infection",
    "conditions": ["Common cold", "Flu"],
    "actions": ["Rest", "Hydrate"],
    "precautions": ["Avoid cold exposure"],
    "prevention": ["Wash hands"],
    "when_to_visit": "If fever exceeds 3 days",
    "risk_level": "LOW",
    "medicines": ["Paracetamol"],
}


def completion_body(content: str) -> dict:
    return {
        "id": "chatcmpl-test",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 20},
    }


class FakeCompletionAPI:
    """httpx.MockTransport handler that replays queued chat completions."""

    def __init__(self):
        self.responses = []
        self.requests = []

    def reply(self, content):
        """Queue a successful completion; dicts are sent as JSON text."""
        if isinstance(content, dict):
            content = json.dumps(content)
        self.responses.append(httpx.Response(200, json=completion_body(content)))

    def fail(self, status_code: int, body: str = "upstream exploded"):
        self.responses.append(httpx.Response(status_code, text=body))

    def raise_error(self, error: Exception):
        self.responses.append(error)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("unexpected completion API call")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        openai_api_key="test-key",
        database_path=str(tmp_path / "analyses.db"),
        completion_retry_backoff=0.0,
    )


@pytest.fixture
def completion_api():
    return FakeCompletionAPI()


@pytest.fixture
def completion_client(settings, completion_api):
    client = OpenAICompletionClient(settings, transport=httpx.MockTransport(completion_api))
    yield client
    client.close()


@pytest.fixture
def store(settings):
    return AnalysisStore(settings.database_path)


@pytest.fixture
def relay(store, completion_client, settings):
    return SymptomAnalysisRelay(store, completion_client, settings)


@pytest.fixture
def make_client(store, completion_client):
    """Build a TestClient whose services use the fake completion API."""

    def _make(settings: Settings) -> TestClient:
        app = create_app(settings)

        def _service():
            yield AnalysisService(settings, store=store, completion=completion_client)

        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_analysis_service] = _service
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client, settings):
    return make_client(settings)
