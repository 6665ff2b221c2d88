"""
Unit tests for the streaming chat proxy service.
"""
import json

import pytest
import requests
from unittest.mock import MagicMock


def _upstream(lines=None, ok=True, status_code=200, text=""):
    response = MagicMock()
    response.ok = ok
    response.status_code = status_code
    response.text = text
    response.iter_lines.return_value = iter(lines or [])
    return response


def _chunk(text):
    return "data: " + json.dumps({"candidates": [{"content": {"parts": [{"text": text}]}}]})


class TestBuildContents:
    """Tests for conversation assembly."""

    def test_context_and_greeting_come_first(self):
        from backend.modules.assistant_prompt import GREETING, SYSTEM_CONTEXT
        from backend.services.chat_service import build_contents

        contents = build_contents("When is Annadanam?")

        assert contents[0] == {"role": "user", "parts": [{"text": SYSTEM_CONTEXT}]}
        assert contents[1] == {"role": "model", "parts": [{"text": GREETING}]}
        assert contents[-1] == {"role": "user", "parts": [{"text": "When is Annadanam?"}]}
        assert len(contents) == 3

    def test_non_user_roles_become_model(self):
        from backend.services.chat_service import build_contents

        history = [
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Swamiye Saranam"},
            {"role": "bot", "content": None},
        ]
        roles = [c["role"] for c in build_contents("next", history)[2:-1]]

        assert roles == ["user", "model", "model"]

    def test_history_is_trimmed_to_recent_turns(self):
        from backend.services.chat_service import build_contents

        history = [{"role": "user", "content": f"turn {i}"} for i in range(15)]
        contents = build_contents("now", history)

        assert len(contents) == 2 + 10 + 1
        assert contents[2]["parts"][0]["text"] == "turn 5"

    def test_trim_history(self):
        from backend.services.chat_service import trim_history

        assert trim_history(None) == []
        assert trim_history([{"a": 1}, {"a": 2}], limit=1) == [{"a": 2}]
        assert trim_history([{"a": 1}], limit=0) == []

    def test_payload_carries_generation_settings(self):
        from backend.services.chat_service import build_payload

        payload = build_payload("hello")
        assert payload["generationConfig"]["maxOutputTokens"] == 1024
        assert len(payload["safetySettings"]) == 4


class TestExtractText:
    def test_first_part_text(self):
        from backend.services.chat_service import extract_text

        data = json.dumps({"candidates": [{"content": {"parts": [{"text": "A"}, {"text": "B"}]}}]})
        assert extract_text(data) == "A"

    @pytest.mark.parametrize("data", [
        "not json",
        "{}",
        json.dumps({"candidates": []}),
        json.dumps({"candidates": [{"content": {"parts": [{"text": ""}]}}]}),
        json.dumps({"candidates": [{"finishReason": "SAFETY"}]}),
    ])
    def test_missing_text(self, data):
        from backend.services.chat_service import extract_text

        assert extract_text(data) is None


class TestReframeSSE:
    """Tests for upstream event re-framing."""

    def test_keeps_order_and_skips_noise(self):
        from backend.services.chat_service import reframe_sse

        lines = [_chunk("Swamiye "), "", ": keep-alive", "data: {broken", _chunk("Saranam"), "data: [DONE]"]

        assert list(reframe_sse(lines)) == [
            'data: {"text": "Swamiye "}\n\n',
            'data: {"text": "Saranam"}\n\n',
        ]

    def test_non_ascii_is_kept(self):
        from backend.services.chat_service import reframe_sse

        events = list(reframe_sse([_chunk("ஐயப்பா")]))
        assert json.loads(events[0][len("data: "):]) == {"text": "ஐயப்பா"}


class TestChatService:
    """Tests for the upstream stream lifecycle."""

    def test_open_stream_posts_sse_request(self):
        from backend.core.metrics import metrics
        from backend.services.chat_service import ChatService

        session = MagicMock()
        session.headers = {}
        session.post.return_value = _upstream()
        service = ChatService(session=session)

        response = service.open_stream("hello", [], "test-key")

        assert response is session.post.return_value
        args, kwargs = session.post.call_args
        assert args[0].endswith(":streamGenerateContent")
        assert kwargs["params"] == {"alt": "sse", "key": "test-key"}
        assert kwargs["stream"] is True
        assert kwargs["json"]["contents"][-1]["parts"][0]["text"] == "hello"
        assert metrics.chat_requests == 1

    def test_upstream_status_is_passed_through(self):
        from backend.core.metrics import metrics
        from backend.services.chat_service import ChatService, UpstreamChatError

        session = MagicMock()
        session.headers = {}
        upstream = _upstream(ok=False, status_code=429, text="quota exceeded " + "x" * 200)
        session.post.return_value = upstream

        with pytest.raises(UpstreamChatError) as exc_info:
            ChatService(session=session).open_stream("hello", None, "test-key")

        assert exc_info.value.status_code == 429
        assert exc_info.value.message.startswith("Failed to get response from AI: quota exceeded")
        assert len(exc_info.value.message) == len("Failed to get response from AI: ") + 100
        upstream.close.assert_called_once()
        assert metrics.chat_failures == 1

    def test_relay_tracks_active_streams(self):
        from backend.core.metrics import metrics
        from backend.services.chat_service import ChatService

        session = MagicMock()
        session.headers = {}
        upstream = _upstream(lines=[_chunk("one"), _chunk("two")])
        service = ChatService(session=session)

        events = service.relay(upstream)
        assert next(events) == 'data: {"text": "one"}\n\n'
        assert metrics.active_chat_streams == 1

        assert list(events) == ['data: {"text": "two"}\n\n']
        assert metrics.active_chat_streams == 0
        upstream.close.assert_called_once()

    def test_relay_interrupted(self):
        from backend.core.metrics import metrics
        from backend.services.chat_service import ChatService

        session = MagicMock()
        session.headers = {}
        upstream = _upstream()
        upstream.iter_lines.side_effect = requests.ConnectionError("reset")

        with pytest.raises(requests.ConnectionError):
            list(ChatService(session=session).relay(upstream))

        assert metrics.chat_failures == 1
        assert metrics.active_chat_streams == 0
        upstream.close.assert_called_once()

    def test_transcribe_sends_inline_audio(self):
        from backend.services.chat_service import ChatService

        session = MagicMock()
        session.headers = {}
        session.post.return_value = _upstream(
            text=json.dumps({"candidates": [{"content": {"parts": [{"text": " Annadanam timings? \n"}]}}]}))

        text = ChatService(session=session).transcribe(b"RIFF", "audio/wav", "test-key")

        assert text == "Annadanam timings?"
        args, kwargs = session.post.call_args
        assert args[0].endswith(":generateContent")
        inline = kwargs["json"]["contents"][0]["parts"][1]["inline_data"]
        assert inline == {"mime_type": "audio/wav", "data": "UklGRg=="}

    def test_transcribe_error(self):
        from backend.services.chat_service import ChatService, UpstreamChatError

        session = MagicMock()
        session.headers = {}
        session.post.return_value = _upstream(ok=False, status_code=400, text="bad audio")

        with pytest.raises(UpstreamChatError) as exc_info:
            ChatService(session=session).transcribe(b"...", "", "test-key")
        assert exc_info.value.status_code == 400
