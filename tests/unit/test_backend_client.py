"""
Tests for the frontend's portal API client.

Requests are intercepted at ``client.session.request`` so no server is
needed.
"""
from datetime import date

import pytest
import requests
from unittest.mock import MagicMock, patch


def _response(status_code=200, json_data=None, content=b"", headers=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {}
    response.content = content
    response.text = text
    if json_data is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def client():
    from frontend.services.backend_client import SamithiAPIClient
    return SamithiAPIClient(base_url="http://api.test", timeout=5, max_retries=1)


class TestRequests:
    def test_headers_carry_token_and_session(self, client):
        with patch.object(client.session, 'request', return_value=_response(json_data={"items": []})) as request:
            client.list_pooja("tok-1")

        args, kwargs = request.call_args
        assert args == ('GET', 'http://api.test/api/v1/admin/pooja')
        assert kwargs['headers'] == {"Authorization": "Bearer tok-1"}
        assert kwargs['timeout'] == 5

    def test_none_params_are_dropped(self, client):
        with patch.object(client.session, 'request', return_value=_response(json_data={"items": []})) as request:
            client.list_donations("tok", start=date(2025, 11, 1))

        assert request.call_args.kwargs['params'] == {"start": "2025-11-01"}

    def test_annadanam_filters(self, client):
        rows = [{"name": "Ravi"}]
        with patch.object(client.session, 'request', return_value=_response(json_data={"items": rows, "total": 1})) as request:
            result = client.list_annadanam("tok", date(2025, 11, 20), "8pm-10pm")

        assert result.success is True
        assert result.rows == rows
        assert request.call_args.kwargs['params'] == {"date": "2025-11-20", "session": "8pm-10pm"}


class TestErrors:
    """Failures come back as unsuccessful responses, never raised."""

    def test_detail_message(self, client):
        with patch.object(client.session, 'request',
                          return_value=_response(403, json_data={"detail": "Admin access required"})):
            result = client.list_contacts("tok")

        assert result.success is False
        assert result.rows == []
        assert result.error == "Admin access required"
        assert result.status_code == 403

    def test_error_key_message(self, client):
        with patch.object(client.session, 'request',
                          return_value=_response(500, json_data={"error": "Gemini API key not configured"})):
            result = client.transcribe(b"RIFF")

        assert result.error == "Gemini API key not configured"

    def test_validation_error_list(self, client):
        body = {"detail": [{"msg": "field required"}, {"msg": "invalid date"}]}
        with patch.object(client.session, 'request', return_value=_response(422, json_data=body)):
            result = client.list_pooja("tok")

        assert result.error == "field required; invalid date"

    def test_non_json_error(self, client):
        with patch.object(client.session, 'request', return_value=_response(502, text="Bad gateway")):
            result = client.blocked_users("tok")

        assert result.error == "HTTP 502: Bad gateway"

    def test_unreachable(self, client):
        with patch.object(client.session, 'request', side_effect=requests.ConnectionError("refused")):
            result = client.lookup_pass("abc")

        assert result.success is False
        assert result.error.startswith("Cannot reach server")

    def test_health_check_unreachable(self, client):
        with patch.object(client.session, 'request', side_effect=requests.ConnectionError("refused")):
            assert client.health_check() is False


class TestEndpoints:
    def test_pass_token_is_quoted(self, client):
        with patch.object(client.session, 'request',
                          return_value=_response(json_data={"booking": {}, "attended": False})) as request:
            client.lookup_pass("a/b c")

        assert request.call_args[0][1] == 'http://api.test/api/v1/passes/a%2Fb%20c'

    def test_mark_attended(self, client):
        with patch.object(client.session, 'request',
                          return_value=_response(json_data={"booking": {}, "attended": True})) as request:
            result = client.mark_attended("tok", "pass-1")

        assert result.success is True
        assert request.call_args[0] == ('POST', 'http://api.test/api/v1/passes/pass-1/attend')

    def test_unblock_user(self, client):
        with patch.object(client.session, 'request',
                          return_value=_response(json_data={"user_id": "u1", "notes": "n"})) as request:
            client.unblock_user("tok", "u1", email="ravi@example.org")

        assert request.call_args[0][1] == 'http://api.test/api/v1/admin/blocked-users/u1/unblock'
        assert request.call_args.kwargs['params'] == {"email": "ravi@example.org"}

    def test_transcribe_sends_raw_audio(self, client):
        with patch.object(client.session, 'request', return_value=_response(json_data={"text": "hi"})) as request:
            result = client.transcribe(b"RIFF", "audio/webm", session_id="sid")

        kwargs = request.call_args.kwargs
        assert kwargs['data'] == b"RIFF"
        assert kwargs['headers'] == {"X-Session-ID": "sid", "Content-Type": "audio/webm"}
        assert result.data == {"text": "hi"}


class TestDownloads:
    def test_filename_from_disposition(self, client):
        response = _response(
            content=b"a,b\n",
            headers={"Content-Disposition": 'attachment; filename="donations_20251120.csv"',
                     "Content-Type": "text/csv; charset=utf-8"},
        )
        with patch.object(client.session, 'request', return_value=response) as request:
            result = client.download_list("tok", "donations", "csv", start=date(2025, 11, 1))

        assert result.success is True
        assert result.content == b"a,b\n"
        assert result.filename == "donations_20251120.csv"
        assert result.mime_type == "text/csv"
        assert request.call_args[0][1] == 'http://api.test/api/v1/admin/donations/download'
        assert request.call_args.kwargs['params'] == {"format": "csv", "start": "2025-11-01"}

    def test_fallback_filename(self, client):
        with patch.object(client.session, 'request', return_value=_response(content=b"{}")):
            result = client.bulk_export("tok", "json")

        assert result.filename == "admin-export.json"
        assert result.mime_type == "application/octet-stream"

    def test_download_error(self, client):
        with patch.object(client.session, 'request',
                          return_value=_response(401, json_data={"detail": "Not authenticated"})):
            result = client.bulk_export("tok", "csv")

        assert result.success is False
        assert result.error == "Not authenticated"


class TestSingleton:
    def test_get_api_client_is_shared(self):
        from frontend.services.backend_client import get_api_client

        assert get_api_client() is get_api_client()


class TestSessionCatalog:
    CATALOG = {
        "afternoon": ["1:00 PM - 1:30 PM"],
        "evening": ["8:00 PM - 8:30 PM"],
        "filter_options": [{"value": "all", "label": "All Timings"},
                           {"value": "1pm-3pm", "label": "1:00 PM to 3:00 PM"}],
    }

    def test_parses_and_caches(self, client):
        with patch.object(client.session, 'request', return_value=_response(json_data=self.CATALOG)) as request:
            first = client.session_catalog()
            second = client.session_catalog()

        assert request.call_count == 1
        assert request.call_args[0] == ('GET', 'http://api.test/api/v1/sessions')
        assert first is second
        assert first.all_sessions == ["1:00 PM - 1:30 PM", "8:00 PM - 8:30 PM"]
        assert first.filter_options == [("all", "All Timings"), ("1pm-3pm", "1:00 PM to 3:00 PM")]

    def test_failure_is_not_cached(self, client):
        with patch.object(client.session, 'request', side_effect=requests.ConnectionError("refused")):
            assert client.session_catalog() is None

        with patch.object(client.session, 'request', return_value=_response(json_data=self.CATALOG)):
            assert client.session_catalog() is not None
