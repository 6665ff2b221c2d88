"""
Streaming chat client.

Reads the API's ``data: {"text": ...}`` events, accumulates the reply and
strips markdown emphasis as it goes. Any failure replaces the reply with
CHAT_APOLOGY; a half-streamed reply is not kept.
"""

import json
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional

import requests

from frontend.config.settings import CHAT_APOLOGY, config
from frontend.utils.exceptions import APIError, BackendUnavailableError, RateLimitError
from frontend.utils.voice import strip_markdown

logger = logging.getLogger(__name__)

SSE_PREFIX = "data: "


@dataclass
class ChatResult:
    """Outcome of one assistant turn."""
    success: bool
    text: str
    error: Optional[str] = None


def parse_event(line: str) -> Optional[str]:
    """Text fragment carried by one event line, or None.

    Example:
        >>> parse_event('data: {"text": "Swamiye"}')
        'Swamiye'
    """
    if not line or not line.startswith(SSE_PREFIX):
        return None
    try:
        payload = json.loads(line[len(SSE_PREFIX):])
    except (json.JSONDecodeError, ValueError):
        return None
    text = payload.get("text") if isinstance(payload, dict) else None
    return text if isinstance(text, str) and text else None


def _raise_for_status(response: requests.Response) -> None:
    if response.ok:
        return
    try:
        message = response.json().get("error") or f"HTTP {response.status_code}"
    except (json.JSONDecodeError, ValueError, AttributeError):
        message = f"HTTP {response.status_code}"
    if response.status_code == 429:
        retry_after = response.headers.get("Retry-After")
        raise RateLimitError(message, retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None)
    raise APIError(message, status_code=response.status_code)


class ChatClient:
    """Client for the streamed chat route."""

    def __init__(self, base_url: str = None, timeout: int = None, session: requests.Session = None):
        self.base_url = base_url or config.API_BASE_URL
        self.timeout = timeout or config.CHAT_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def stream(self, message: str, history: List[Dict[str, str]], session_id: Optional[str] = None) -> Iterator[str]:
        """Yield text fragments in arrival order.

        Raises:
            RateLimitError: too many messages from this session
            APIError: error status from the API
            BackendUnavailableError: the API could not be reached
        """
        headers = {"X-Session-ID": session_id} if session_id else {}
        payload = {
            "message": message,
            "history": history[-config.CHAT_HISTORY_TURNS:],
        }
        try:
            response = self.session.post(
                f"{self.base_url}/api/v1/chat",
                json=payload,
                headers=headers,
                stream=True,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise BackendUnavailableError(f"Cannot reach chat service: {e}") from e

        with response:
            _raise_for_status(response)
            try:
                for line in response.iter_lines(decode_unicode=True):
                    text = parse_event(line)
                    if text:
                        yield text
            except requests.exceptions.RequestException as e:
                raise BackendUnavailableError(f"Chat stream interrupted: {e}") from e

    def reply(
        self,
        message: str,
        history: List[Dict[str, str]],
        session_id: Optional[str] = None,
        on_text: Optional[Callable[[str], None]] = None,
    ) -> ChatResult:
        """Run one assistant turn.

        ``on_text`` receives the cleaned reply so far after every fragment.
        """
        accumulated = ""
        try:
            for fragment in self.stream(message, history, session_id):
                accumulated += fragment
                if on_text:
                    on_text(strip_markdown(accumulated))
        except (APIError, BackendUnavailableError) as e:
            logger.warning(f"Chat failed: {e.message}")
            if on_text:
                on_text(CHAT_APOLOGY)
            return ChatResult(success=False, text=CHAT_APOLOGY, error=e.message)

        return ChatResult(success=True, text=strip_markdown(accumulated))


_chat_client: Optional[ChatClient] = None


def get_chat_client() -> ChatClient:
    """Get shared chat client."""
    global _chat_client
    if _chat_client is None:
        _chat_client = ChatClient()
    return _chat_client
