"""
Integration tests for the chat proxy API.

The chat service is replaced with a mock; the upstream model is never
contacted.
"""
import pytest
import requests
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch

from backend.services.chat_service import UpstreamChatError

SESSION_ID = "2b4f8c1e-7d3a-4e5f-9a1b-3c6d8e0f2a4b"


@pytest.fixture
def chat_service():
    service = MagicMock()
    service.relay.return_value = iter(['data: {"text": "Swamiye "}\n\n', 'data: {"text": "Saranam"}\n\n'])
    service.transcribe.return_value = "Annadanam timings"
    return service


@pytest.fixture
def client(chat_service):
    from backend.main import app
    from backend.services.chat_service import get_chat_service

    app.dependency_overrides[get_chat_service] = lambda: chat_service
    with patch('backend.api.v1.chat.get_gemini_api_key', return_value="test-key"):
        yield TestClient(app)
    app.dependency_overrides.clear()


class TestChat:
    """Tests for the streaming chat route."""

    def test_streams_events(self, client, chat_service):
        response = client.post(
            "/api/v1/chat",
            json={"message": "Hi", "history": [{"role": "assistant", "content": "Swamiye Saranam"}]},
            headers={"X-Session-ID": SESSION_ID},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.text == 'data: {"text": "Swamiye "}\n\ndata: {"text": "Saranam"}\n\n'
        message, history, api_key = chat_service.open_stream.call_args[0]
        assert message == "Hi"
        assert history == [{"role": "assistant", "content": "Swamiye Saranam"}]
        assert api_key == "test-key"

    @pytest.mark.parametrize("body", [{}, {"message": ""}, {"message": "   "}])
    def test_message_required(self, client, chat_service, body):
        response = client.post("/api/v1/chat", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Message is required"}
        chat_service.open_stream.assert_not_called()

    def test_missing_api_key(self, chat_service):
        from backend.main import app
        from backend.services.chat_service import get_chat_service

        app.dependency_overrides[get_chat_service] = lambda: chat_service
        try:
            with patch('backend.api.v1.chat.get_gemini_api_key', return_value=None):
                response = TestClient(app).post("/api/v1/chat", json={"message": "Hi"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {"error": "Gemini API key not configured"}

    def test_upstream_status_passed_through(self, client, chat_service):
        chat_service.open_stream.side_effect = UpstreamChatError(403, "API key not valid")

        response = client.post("/api/v1/chat", json={"message": "Hi"})

        assert response.status_code == 403
        assert response.json() == {"error": "Failed to get response from AI: API key not valid"}

    def test_upstream_unreachable(self, client, chat_service):
        chat_service.open_stream.side_effect = requests.ConnectionError("refused")

        response = client.post("/api/v1/chat", json={"message": "Hi"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    def test_invalid_session_id(self, client):
        response = client.post("/api/v1/chat", json={"message": "Hi"}, headers={"X-Session-ID": "not-a-uuid"})
        assert response.status_code == 400


class TestRateLimit:
    def test_over_limit_is_429(self, client):
        from backend.core.metrics import metrics

        for _ in range(20):
            response = client.post("/api/v1/chat", json={"message": "Hi"}, headers={"X-Session-ID": SESSION_ID})
            assert response.status_code == 200

        response = client.post("/api/v1/chat", json={"message": "Hi"}, headers={"X-Session-ID": SESSION_ID})

        assert response.status_code == 429
        assert "Too many messages" in response.json()["error"]
        assert 1 <= int(response.headers["Retry-After"]) <= 60
        assert metrics.rate_limit_exceeded == 1

    def test_retry_after_counts_from_oldest_message(self, client):
        from backend.core.rate_limit import SlidingWindowLimiter

        clock = MagicMock(return_value=1000.0)
        limiter = SlidingWindowLimiter(window_seconds=60, clock=clock)
        with patch('backend.api.v1.chat.chat_rate_limiter', limiter):
            for _ in range(20):
                client.post("/api/v1/chat", json={"message": "Hi"}, headers={"X-Session-ID": SESSION_ID})
            clock.return_value = 1042.0
            response = client.post("/api/v1/chat", json={"message": "Hi"}, headers={"X-Session-ID": SESSION_ID})

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "18"

    def test_transcription_has_its_own_budget(self, client):
        for _ in range(20):
            client.post("/api/v1/chat", json={"message": "Hi"}, headers={"X-Session-ID": SESSION_ID})
        assert client.post("/api/v1/chat", json={"message": "Hi"},
                           headers={"X-Session-ID": SESSION_ID}).status_code == 429

        for _ in range(10):
            response = client.post("/api/v1/chat/transcribe", content=b"audio", headers={"X-Session-ID": SESSION_ID})
            assert response.status_code == 200

        response = client.post("/api/v1/chat/transcribe", content=b"audio", headers={"X-Session-ID": SESSION_ID})
        assert response.status_code == 429
        assert "Too many recordings" in response.json()["error"]


class TestTranscribe:
    def test_transcribes_audio(self, client, chat_service):
        response = client.post(
            "/api/v1/chat/transcribe",
            content=b"RIFF....WAVE",
            headers={"Content-Type": "audio/webm;codecs=opus", "X-Session-ID": SESSION_ID},
        )

        assert response.status_code == 200
        assert response.json() == {"text": "Annadanam timings"}
        audio, mime_type, api_key = chat_service.transcribe.call_args[0]
        assert audio == b"RIFF....WAVE"
        assert mime_type == "audio/webm"

    def test_empty_audio(self, client):
        response = client.post("/api/v1/chat/transcribe", content=b"")

        assert response.status_code == 400
        assert response.json() == {"error": "Audio is required"}

    def test_upstream_error(self, client, chat_service):
        chat_service.transcribe.side_effect = UpstreamChatError(400, "Unsupported audio")

        response = client.post("/api/v1/chat/transcribe", content=b"data")

        assert response.status_code == 400
        assert response.json()["error"].endswith("Unsupported audio")
