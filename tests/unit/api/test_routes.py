"""LLM API Route Tests"""

import re
from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel, ValidationError

from medsim.config import settings
from medsim.core.data.models import LLMRequest, LLMResponse, LLMUsage
from medsim.core.resilience.errors import ProviderError, RetryDeadlineExceeded
from medsim.core.resilience.reporting import (
    DEFAULT_MESSAGE,
    RATE_LIMIT_MESSAGE,
    SERVICE_UNAVAILABLE_MESSAGE,
)

UUID_V4 = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")

VALID_REQUEST = {
    "type": "patient_generation",
    "systemPrompt": "You generate realistic simulated patients.",
    "userPrompt": "Generate a patient presenting with chest pain.",
}


@pytest.fixture
def llm_client(client):
    """Replace the app's provider client for the duration of a test"""
    fake = AsyncMock()
    fake.chat.return_value = LLMResponse(
        content="A 54-year-old presents with chest pain.",
        usage=LLMUsage(prompt_tokens=10, completion_tokens=20, total_tokens=30),
        model="llama3.1",
        provider="ollama",
    )
    client.app.state.llm_client = fake
    return fake


def assert_envelope(payload, message, retryable):
    assert set(payload) == {"success", "error", "correlationId", "retryable"}
    assert payload["success"] is False
    assert payload["error"] == message
    assert payload["retryable"] is retryable
    assert UUID_V4.match(payload["correlationId"])


class TestGenerateCompletion:
    """POST /api/llm"""

    def test_success(self, client, llm_client):
        response = client.post("/api/llm", json=VALID_REQUEST)

        assert response.status_code == 200
        data = response.json()
        assert data["content"] == "A 54-year-old presents with chest pain."
        assert data["success"] is True
        assert data["provider"] == "ollama"
        assert data["disclaimer"] == settings.MEDICAL_DISCLAIMER
        assert data["requestType"] == "patient_generation"
        assert data["usage"]["totalTokens"] == 30
        assert data["timestamp"].endswith("Z")

        llm_request = llm_client.chat.await_args.args[0]
        assert llm_request.user_prompt == VALID_REQUEST["userPrompt"]
        assert llm_request.system_prompt == VALID_REQUEST["systemPrompt"]

    def test_missing_user_prompt(self, client, llm_client):
        response = client.post("/api/llm", json={"type": "chat_response"})

        assert response.status_code == 400
        assert_envelope(response.json(), "The request was invalid. Please check your input.", False)
        llm_client.chat.assert_not_awaited()

    def test_unknown_request_type(self, client, llm_client):
        response = client.post("/api/llm", json={**VALID_REQUEST, "type": "diagnosis"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_validation_error_does_not_echo_input(self, client, llm_client):
        response = client.post(
            "/api/llm",
            json={"type": "chat_response", "userPrompt": "", "patientName": "John Doe"},
        )

        assert response.status_code == 400
        assert "John Doe" not in response.text

    @pytest.mark.parametrize(
        "error, status_code, message, retryable",
        [
            (ProviderError("Too many requests", status=429), 429, RATE_LIMIT_MESSAGE, True),
            (ProviderError("Service unavailable", status=503), 503, SERVICE_UNAVAILABLE_MESSAGE, True),
            (Exception("Rate limit exceeded"), 429, RATE_LIMIT_MESSAGE, True),
            (
                Exception("Invalid API key"),
                401,
                "There is a problem with access authentication. Please contact an administrator.",
                False,
            ),
            (Exception("Something broke"), 500, SERVICE_UNAVAILABLE_MESSAGE, True),
            (
                RetryDeadlineExceeded("ollama.chat", 30),
                504,
                "The request timed out. Please wait a moment and try again.",
                True,
            ),
        ],
    )
    def test_provider_failures(self, client, llm_client, error, status_code, message, retryable):
        llm_client.chat.side_effect = error

        response = client.post("/api/llm", json=VALID_REQUEST)

        assert response.status_code == status_code
        assert response.headers["content-type"].startswith("application/json")
        assert_envelope(response.json(), message, retryable)

    def test_provider_model_validation_is_a_server_error(self, client, llm_client):
        """Only request bodies answer 400; a bad provider payload is our fault"""

        class ChatPayload(BaseModel):
            content: str

        with pytest.raises(ValidationError) as excinfo:
            ChatPayload.model_validate({"content": 1})
        llm_client.chat.side_effect = excinfo.value

        response = client.post("/api/llm", json=VALID_REQUEST)

        assert response.status_code == 500
        assert_envelope(response.json(), SERVICE_UNAVAILABLE_MESSAGE, True)

    def test_request_context_is_ignored(self, client, llm_client):
        response = client.post(
            "/api/llm", json={**VALID_REQUEST, "context": {"patientName": "John Doe"}}
        )

        assert response.status_code == 200
        llm_request = llm_client.chat.await_args.args[0]
        assert "context" not in LLMRequest.model_fields
        assert "John Doe" not in llm_request.model_dump_json()

    def test_error_detail_is_not_exposed(self, client, llm_client):
        llm_client.chat.side_effect = ProviderError(
            "connect to http://10.0.0.5:11434 failed", status=502
        )

        response = client.post("/api/llm", json=VALID_REQUEST)

        assert response.status_code == 502
        assert "10.0.0.5" not in response.text


class TestHealth:
    """GET /api/health"""

    def test_reports_rate_limiter(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["rate_limiter"]["capacity"] == settings.RATE_LIMIT_CAPACITY
        assert data["rate_limiter"]["refill_rate"] == pytest.approx(settings.refill_rate)
        assert 0 <= data["rate_limiter"]["available_tokens"] <= settings.RATE_LIMIT_CAPACITY


class TestUnknownRoutes:

    def test_not_found_envelope(self, client):
        response = client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert_envelope(response.json(), "The requested resource could not be found.", False)

    def test_method_not_allowed(self, client):
        response = client.get("/api/llm")

        assert response.status_code == 405
        assert_envelope(response.json(), DEFAULT_MESSAGE, False)
