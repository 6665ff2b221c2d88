"""
Backend API Client for the portal frontend.

Provides access to the portal API with retry logic and error handling.
Methods return response dataclasses instead of raising on HTTP errors,
so pages can show ``error`` and reset their state.
"""

import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from frontend.config.settings import config

logger = logging.getLogger(__name__)


@dataclass
class APIResponse:
    """Standardized response from the portal API."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None


@dataclass
class RowsResponse:
    """Rows from an admin list."""
    success: bool
    rows: List[dict] = field(default_factory=list)
    error: Optional[str] = None
    status_code: Optional[int] = None


@dataclass
class FileResponse:
    """A downloaded export file."""
    success: bool
    content: bytes = b""
    filename: Optional[str] = None
    mime_type: Optional[str] = None
    error: Optional[str] = None


@dataclass
class SessionCatalog:
    """Annadanam session labels served by the API."""
    afternoon: List[str]
    evening: List[str]
    filter_options: List[Tuple[str, str]]  # (value sent to the API, label)

    @property
    def all_sessions(self) -> List[str]:
        return self.afternoon + self.evening

def _error_message(response: requests.Response) -> str:
    """Pull the message out of an error body ({"detail"} or {"error"})."""
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        return f"HTTP {response.status_code}: {response.text[:100] if response.text else 'Unknown error'}"
    if isinstance(body, dict):
        detail = body.get('detail') or body.get('error')
        if isinstance(detail, list):
            # FastAPI validation errors
            return "; ".join(str(item.get('msg', item)) for item in detail)
        if detail:
            return str(detail)
    return f"HTTP {response.status_code}"


def _filename(response: requests.Response, fallback: str) -> str:
    disposition = response.headers.get('Content-Disposition', '')
    if 'filename=' in disposition:
        return disposition.split('filename=', 1)[1].strip().strip('"')
    return fallback


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


class SamithiAPIClient:
    """Client for the portal API with retry logic."""

    def __init__(
        self,
        base_url: str = None,
        timeout: int = None,
        max_retries: int = None,
    ):
        """Initialize API client.

        Args:
            base_url: Backend API URL (default from config)
            timeout: Request timeout in seconds
            max_retries: Maximum retry attempts for idempotent requests
        """
        self.base_url = base_url or config.API_BASE_URL
        self.timeout = timeout or config.API_TIMEOUT_SECONDS
        self.max_retries = max_retries or config.MAX_RETRY_ATTEMPTS

        # Retries apply to GETs only (urllib3 default allowed_methods)
        self.session = requests.Session()
        retry_strategy = Retry(
            total=self.max_retries,
            backoff_factor=0.5,
            status_forcelist=[504],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        self._session_catalog: Optional[SessionCatalog] = None

    def _get_headers(self, token: Optional[str] = None, session_id: Optional[str] = None) -> Dict[str, str]:
        """Get request headers for the signed-in user and browser session."""
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if session_id:
            headers["X-Session-ID"] = session_id
        return headers

    def _request(
        self,
        method: str,
        endpoint: str,
        token: Optional[str] = None,
        session_id: Optional[str] = None,
        **kwargs
    ) -> requests.Response:
        """Make HTTP request with error handling."""
        url = f"{self.base_url}{endpoint}"
        kwargs.setdefault('timeout', self.timeout)

        headers = self._get_headers(token, session_id)
        if 'headers' in kwargs:
            headers.update(kwargs['headers'])
        kwargs['headers'] = headers

        try:
            return self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"Request failed: {method} {url} - {e}")
            raise

    def _json_call(self, method: str, endpoint: str, **kwargs) -> APIResponse:
        try:
            response = self._request(method, endpoint, **kwargs)
        except requests.exceptions.RequestException as e:
            return APIResponse(success=False, error=f"Cannot reach server: {e}")

        if response.status_code >= 400:
            return APIResponse(success=False, error=_error_message(response), status_code=response.status_code)

        try:
            return APIResponse(success=True, data=response.json(), status_code=response.status_code)
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"Invalid JSON in response from {endpoint}: {e}")
            return APIResponse(success=False, error="Invalid response from server", status_code=response.status_code)

    def _rows_call(self, endpoint: str, token: Optional[str], params: Dict[str, Any]) -> RowsResponse:
        result = self._json_call(
            'GET', endpoint, token=token,
            params={k: v for k, v in params.items() if v is not None},
        )
        if not result.success:
            return RowsResponse(success=False, error=result.error, status_code=result.status_code)
        items = result.data.get('items') if isinstance(result.data, dict) else None
        return RowsResponse(success=True, rows=items or [], status_code=result.status_code)

    # Health check
    def health_check(self) -> bool:
        """Check if backend is healthy."""
        try:
            response = self._request('GET', '/api/v1/health')
            return response.status_code == 200
        except requests.exceptions.RequestException:
            return False

    # Sessions
    def session_catalog(self) -> Optional[SessionCatalog]:
        """Session labels and filter options, fetched once per client.

        Returns None (and caches nothing) when the API cannot be reached.
        """
        if self._session_catalog is not None:
            return self._session_catalog

        result = self._json_call('GET', '/api/v1/sessions')
        if not result.success:
            logger.warning(f"Session catalogue unavailable: {result.error}")
            return None

        data = result.data
        self._session_catalog = SessionCatalog(
            afternoon=list(data.get("afternoon", [])),
            evening=list(data.get("evening", [])),
            filter_options=[(o["value"], o["label"]) for o in data.get("filter_options", [])],
        )
        return self._session_catalog

    # Auth
    def login(self, email: str, password: str) -> APIResponse:
        """Sign in; ``data`` holds access_token, id, email and is_admin."""
        return self._json_call('POST', '/api/v1/auth/login', json={"email": email, "password": password})

    def me(self, token: str) -> APIResponse:
        return self._json_call('GET', '/api/v1/auth/me', token=token)

    # Admin lists
    def list_annadanam(self, token: str, booking_date: Optional[date] = None, session: Optional[str] = None) -> RowsResponse:
        """Annadanam bookings for one day; session may be a label, a band or 'all'."""
        return self._rows_call('/api/v1/admin/annadanam', token, {"date": _iso(booking_date), "session": session})

    def list_pooja(self, token: str, start: Optional[date] = None, end: Optional[date] = None) -> RowsResponse:
        return self._rows_call('/api/v1/admin/pooja', token, {"start": _iso(start), "end": _iso(end)})

    def list_volunteers(self, token: str, start: Optional[date] = None, end: Optional[date] = None) -> RowsResponse:
        return self._rows_call('/api/v1/admin/volunteers', token, {"start": _iso(start), "end": _iso(end)})

    def list_donations(self, token: str, start: Optional[date] = None, end: Optional[date] = None) -> RowsResponse:
        return self._rows_call('/api/v1/admin/donations', token, {"start": _iso(start), "end": _iso(end)})

    def list_contacts(self, token: str, start: Optional[date] = None, end: Optional[date] = None) -> RowsResponse:
        return self._rows_call('/api/v1/admin/contacts', token, {"start": _iso(start), "end": _iso(end)})

    # Blocking policy
    def blocked_users(self, token: str) -> APIResponse:
        """Block records; ``data`` holds users, active and unblocked lists."""
        return self._json_call('GET', '/api/v1/admin/blocked-users', token=token)

    def run_auto_block_check(self, token: str) -> APIResponse:
        return self._json_call('POST', '/api/v1/admin/blocked-users/check', token=token)

    def unblock_user(self, token: str, user_id: str, email: Optional[str] = None) -> APIResponse:
        params = {"email": email} if email else None
        return self._json_call('POST', f'/api/v1/admin/blocked-users/{user_id}/unblock', token=token, params=params)

    # Passes
    def lookup_pass(self, pass_token: str) -> APIResponse:
        """Booking behind a pass; ``data`` holds booking and attended."""
        return self._json_call('GET', f'/api/v1/passes/{quote(pass_token, safe="")}')

    def mark_attended(self, token: str, pass_token: str) -> APIResponse:
        return self._json_call(
            'POST', f'/api/v1/passes/{quote(pass_token, safe="")}/attend', token=token,
        )

    # Downloads
    def _download(self, endpoint: str, token: str, params: Dict[str, Any], fallback_name: str) -> FileResponse:
        try:
            response = self._request(
                'GET', endpoint, token=token,
                params={k: v for k, v in params.items() if v is not None},
            )
        except requests.exceptions.RequestException as e:
            return FileResponse(success=False, error=f"Cannot reach server: {e}")

        if response.status_code >= 400:
            return FileResponse(success=False, error=_error_message(response))

        return FileResponse(
            success=True,
            content=response.content,
            filename=_filename(response, fallback_name),
            mime_type=response.headers.get('Content-Type', 'application/octet-stream').split(';')[0],
        )

    def download_list(
        self,
        token: str,
        kind: str,
        fmt: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
        booking_date: Optional[date] = None,
        session: Optional[str] = None,
    ) -> FileResponse:
        """Render one admin list as csv, json or pdf."""
        return self._download(
            f'/api/v1/admin/{kind}/download',
            token,
            {
                "format": fmt,
                "start": _iso(start),
                "end": _iso(end),
                "date": _iso(booking_date),
                "session": session,
            },
            f"{kind}.{fmt}",
        )

    def bulk_export(self, token: str, fmt: str, start: Optional[date] = None, end: Optional[date] = None) -> FileResponse:
        """Every section in one json or csv file."""
        return self._download(
            '/api/v1/admin/export',
            token,
            {"format": fmt, "start": _iso(start), "end": _iso(end)},
            f"admin-export.{fmt}",
        )

    # Voice
    def transcribe(self, audio: bytes, mime_type: str = "audio/wav", session_id: Optional[str] = None) -> APIResponse:
        """Transcribe a recorded clip; ``data`` holds text."""
        return self._json_call(
            'POST', '/api/v1/chat/transcribe',
            session_id=session_id,
            data=audio,
            headers={"Content-Type": mime_type},
            timeout=config.CHAT_TIMEOUT_SECONDS,
        )


# Singleton pattern with thread-safe initialization
_api_client: Optional[SamithiAPIClient] = None
_api_client_lock = threading.Lock()


def get_api_client() -> SamithiAPIClient:
    """Get singleton API client instance (thread-safe)."""
    global _api_client
    if _api_client is None:
        with _api_client_lock:
            if _api_client is None:
                _api_client = SamithiAPIClient()
    return _api_client
