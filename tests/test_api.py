import pytest
from fastapi.testclient import TestClient

from conftest import SCENARIO_OUTPUT
from symptomrelay.api.main import create_app
from symptomrelay.api.routers.analysis import get_analysis_service
from symptomrelay.api.services.analysis_service import AnalysisService
from symptomrelay.config import get_settings
from symptomrelay.models.analysis import AnalysisResult, StructuredResult

SCENARIO_REQUEST = {"symptoms": "mild fever and headache", "severity": "mild", "user_id": "u1"}


@pytest.mark.parametrize("path", ["/functions/v1/analyze-symptoms", "/api/analyze-symptoms"])
def test_analyze_returns_flat_result(client, completion_api, path):
    completion_api.reply(SCENARIO_OUTPUT)

    response = client.post(path, json=SCENARIO_REQUEST)

    assert response.status_code == 200
    assert response.json() == {**SCENARIO_OUTPUT, "risk_level": "low"}


@pytest.mark.parametrize(
    "body",
    [
        {"severity": "mild", "user_id": "u1"},
        {"symptoms": "headache", "severity": "mild"},
        {"symptoms": "  ", "user_id": "u1"},
        {"symptoms": "headache", "severity": "unbearable", "user_id": "u1"},
    ],
)
def test_bad_requests_are_400_without_model_call(client, completion_api, body):
    response = client.post("/api/analyze-symptoms", json=body)

    assert response.status_code == 400
    assert set(response.json()) == {"error"}
    assert completion_api.calls == 0


def test_non_json_body_is_400(client, completion_api):
    response = client.post(
        "/api/analyze-symptoms",
        content="symptoms=headache",
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}
    assert completion_api.calls == 0


def test_malformed_model_output_is_opaque_500(client, completion_api):
    completion_api.reply("Sorry, I can only chat about the weather today.")

    response = client.post("/api/analyze-symptoms", json=SCENARIO_REQUEST)

    assert response.status_code == 500
    body = response.json()
    assert set(body) == {"error"}
    assert "weather" not in body["error"]


def test_upstream_failure_hides_provider_body(client, completion_api):
    completion_api.fail(500, "internal stack trace from provider")
    completion_api.fail(500, "internal stack trace from provider")

    response = client.post("/api/analyze-symptoms", json=SCENARIO_REQUEST)

    assert response.status_code == 500
    assert "stack trace" not in response.json()["error"]


class TestWithoutProviderKey:
    @pytest.fixture
    def keyless_client(self, settings, store):
        keyless = settings.model_copy(update={"openai_api_key": None})
        app = create_app(keyless)
        app.dependency_overrides[get_settings] = lambda: keyless

        def _service():
            service = AnalysisService(keyless, store=store)
            try:
                yield service
            finally:
                service.close()

        app.dependency_overrides[get_analysis_service] = _service
        return TestClient(app)

    def test_new_analysis_is_500(self, keyless_client):
        response = keyless_client.post("/api/analyze-symptoms", json=SCENARIO_REQUEST)

        assert response.status_code == 500
        assert response.json() == {"error": "Server missing API key"}

    def test_bad_request_is_still_400(self, keyless_client):
        response = keyless_client.post("/api/analyze-symptoms", json={"user_id": "u1"})

        assert response.status_code == 400
        assert response.json() == {"error": "Symptoms and user_id are required"}

    def test_stored_analysis_is_reused(self, keyless_client, store):
        stored = AnalysisResult(
            caller_id="u1",
            symptoms="mild fever and headache",
            severity="mild",
            risk_level="low",
            structured_result=StructuredResult(
                summary="Likely viral infection",
                conditions=["Common cold", "Flu"],
                actions=["Rest", "Hydrate"],
                precautions=["Avoid cold exposure"],
                prevention=["Wash hands"],
                when_to_visit="If fever exceeds 3 days",
                medicines=["Paracetamol"],
            ),
        )
        store.insert(stored)

        response = keyless_client.post("/api/analyze-symptoms", json=SCENARIO_REQUEST)

        assert response.status_code == 200
        assert response.json() == {**SCENARIO_OUTPUT, "risk_level": "low"}


def test_any_origin_may_call_the_relay(client):
    response = client.options(
        "/functions/v1/analyze-symptoms",
        headers={
            "Origin": "https://patient-app.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, content-type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


class TestAuthToken:
    @pytest.fixture
    def secured(self, make_client, settings):
        return make_client(settings.model_copy(update={"relay_auth_token": "s3cret"}))

    def test_missing_token_is_401(self, secured, completion_api):
        response = secured.post("/api/analyze-symptoms", json=SCENARIO_REQUEST)

        assert response.status_code == 401
        assert set(response.json()) == {"error"}
        assert completion_api.calls == 0

    def test_wrong_token_is_401(self, secured):
        response = secured.post(
            "/functions/v1/analyze-symptoms",
            json=SCENARIO_REQUEST,
            headers={"Authorization": "Bearer nope"},
        )

        assert response.status_code == 401

    @pytest.mark.parametrize(
        "headers",
        [
            {"Authorization": "Bearer s3cre"},
            {"Authorization": "Bearer s3cret2"},
            {"apikey": "S3CRET"},
        ],
    )
    def test_near_miss_tokens_are_401(self, secured, completion_api, headers):
        response = secured.post("/api/analyze-symptoms", json=SCENARIO_REQUEST, headers=headers)

        assert response.status_code == 401
        assert completion_api.calls == 0

    @pytest.mark.parametrize(
        "headers", [{"Authorization": "Bearer s3cret"}, {"apikey": "s3cret"}]
    )
    def test_valid_token_is_accepted(self, secured, completion_api, headers):
        completion_api.reply(SCENARIO_OUTPUT)

        response = secured.post("/api/analyze-symptoms", json=SCENARIO_REQUEST, headers=headers)

        assert response.status_code == 200


class TestHistory:
    def test_lists_analyses_for_the_user(self, client, completion_api):
        completion_api.reply(SCENARIO_OUTPUT)
        client.post("/api/analyze-symptoms", json=SCENARIO_REQUEST)

        response = client.get("/api/analyses", params={"user_id": "u1"})

        assert response.status_code == 200
        body = response.json()
        assert body["total_count"] == 1
        item = body["analyses"][0]
        assert item["symptoms"] == "mild fever and headache"
        assert item["severity"] == "mild"
        assert item["analysis_result"]["risk_level"] == "low"

        single = client.get(f"/api/analyses/{item['id']}", params={"user_id": "u1"})
        assert single.status_code == 200
        assert single.json() == item

    def test_other_users_cannot_read_an_analysis(self, client, completion_api):
        completion_api.reply(SCENARIO_OUTPUT)
        client.post("/api/analyze-symptoms", json=SCENARIO_REQUEST)
        analysis_id = client.get("/api/analyses", params={"user_id": "u1"}).json()["analyses"][0]["id"]

        response = client.get(f"/api/analyses/{analysis_id}", params={"user_id": "u2"})

        assert response.status_code == 404
        assert response.json() == {"error": "Analysis not found"}
        assert client.get("/api/analyses", params={"user_id": "u2"}).json()["total_count"] == 0

    def test_user_id_is_required(self, client):
        response = client.get("/api/analyses")

        assert response.status_code == 400
        assert set(response.json()) == {"error"}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
