"""
Tests for the streamed chat client.
"""
import pytest
import requests
from unittest.mock import MagicMock


def _stream_response(lines=(), status_code=200, json_data=None, headers=None):
    response = MagicMock()
    response.ok = status_code < 400
    response.status_code = status_code
    response.headers = headers or {}
    response.iter_lines.return_value = iter(lines)
    response.json.return_value = json_data or {}
    response.__enter__.return_value = response
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    from frontend.services.chat_client import ChatClient
    return ChatClient(base_url="http://api.test", timeout=5, session=session)


class TestParseEvent:
    @pytest.mark.parametrize("line,expected", [
        ('data: {"text": "Swamiye"}', "Swamiye"),
        ('data: {"text": ""}', None),
        ('data: not-json', None),
        ('data: ["text"]', None),
        ('event: ping', None),
        ('', None),
    ])
    def test_parse_event(self, line, expected):
        from frontend.services.chat_client import parse_event

        assert parse_event(line) == expected


class TestStream:
    def test_fragments_in_order(self, client, session):
        session.post.return_value = _stream_response([
            'data: {"text": "Swamiye "}', '', 'data: {"text": "Saranam"}',
        ])

        assert list(client.stream("hi", [], session_id="sid")) == ["Swamiye ", "Saranam"]

        args, kwargs = session.post.call_args
        assert args[0] == "http://api.test/api/v1/chat"
        assert kwargs["headers"] == {"X-Session-ID": "sid"}
        assert kwargs["stream"] is True

    def test_history_is_capped(self, client, session):
        session.post.return_value = _stream_response()
        history = [{"role": "user", "content": str(i)} for i in range(25)]

        list(client.stream("hi", history))

        sent = session.post.call_args.kwargs["json"]["history"]
        assert len(sent) == 10
        assert sent[0]["content"] == "15"

    def test_rate_limited(self, client, session):
        from frontend.utils.exceptions import RateLimitError

        session.post.return_value = _stream_response(
            status_code=429, json_data={"error": "Too many messages"}, headers={"Retry-After": "60"})

        with pytest.raises(RateLimitError) as exc_info:
            list(client.stream("hi", []))
        assert exc_info.value.retry_after == 60
        assert exc_info.value.message == "Too many messages"

    def test_unreachable(self, client, session):
        from frontend.utils.exceptions import BackendUnavailableError

        session.post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(BackendUnavailableError):
            list(client.stream("hi", []))


class TestReply:
    def test_markdown_is_stripped_while_streaming(self, client, session):
        session.post.return_value = _stream_response([
            'data: {"text": "**Annadanam** is "}', 'data: {"text": "*free*."}',
        ])
        seen = []

        result = client.reply("hi", [], on_text=seen.append)

        assert result.success is True
        assert result.text == "Annadanam is free."
        assert seen == ["Annadanam is ", "Annadanam is free."]

    def test_failure_replaces_partial_reply(self, client, session):
        from frontend.config.settings import CHAT_APOLOGY

        response = _stream_response()
        session.post.return_value = response

        def broken_lines(**kwargs):
            yield 'data: {"text": "Half"}'
            raise requests.ConnectionError("reset")

        response.iter_lines.side_effect = broken_lines
        seen = []

        result = client.reply("hi", [], on_text=seen.append)

        assert result.success is False
        assert result.text == CHAT_APOLOGY
        assert seen[-1] == CHAT_APOLOGY
        assert "interrupted" in result.error

    def test_server_error(self, client, session):
        session.post.return_value = _stream_response(status_code=500, json_data={"error": "Internal server error"})

        result = client.reply("hi", [])

        assert result.success is False
        assert result.error == "Internal server error"
