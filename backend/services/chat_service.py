"""
Streaming chat proxy to the Gemini API.

The browser never sees the API key: the service builds the conversation
(organisation context, greeting, rolling history, new message), opens a
server-sent-events stream upstream and re-frames each chunk as
``data: {"text": "..."}\\n\\n``. Chunks are forwarded in upstream order;
there is no retry.
"""
import base64
import json
import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional

import requests

from backend.config import settings
from backend.core.errors import PortalError
from backend.core.metrics import metrics
from backend.modules.assistant_prompt import GREETING, SYSTEM_CONTEXT, TRANSCRIBE_PROMPT

logger = logging.getLogger(__name__)

GENERATION_CONFIG = {
    "temperature": 0.7,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 1024,
}

SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]

SSE_PREFIX = "data: "
SSE_DONE = "[DONE]"
UPSTREAM_ERROR_PREVIEW = 100


class UpstreamChatError(PortalError):
    """The model API answered with a non-2xx status (status is passed through)."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        super().__init__(f"Failed to get response from AI: {body[:UPSTREAM_ERROR_PREVIEW]}")


def trim_history(history: Optional[List[Dict[str, Any]]], limit: int = settings.CHAT_HISTORY_LIMIT) -> List[Dict[str, Any]]:
    """Keep the most recent ``limit`` turns."""
    if not history:
        return []
    return list(history)[-limit:] if limit > 0 else []


def build_contents(message: str, history: Optional[List[Dict[str, Any]]] = None) -> List[Dict[str, Any]]:
    """Assemble the upstream ``contents`` array.

    Any role other than "user" is sent as "model".
    """
    contents = [
        {"role": "user", "parts": [{"text": SYSTEM_CONTEXT}]},
        {"role": "model", "parts": [{"text": GREETING}]},
    ]
    for turn in trim_history(history):
        contents.append({
            "role": "user" if turn.get("role") == "user" else "model",
            "parts": [{"text": str(turn.get("content") or "")}],
        })
    contents.append({"role": "user", "parts": [{"text": message}]})
    return contents


def build_payload(message: str, history: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    return {
        "contents": build_contents(message, history),
        "generationConfig": GENERATION_CONFIG,
        "safetySettings": SAFETY_SETTINGS,
    }


def extract_text(data: str) -> Optional[str]:
    """Text of the first part of the first candidate, or None.

    Example:
        >>> extract_text('{"candidates":[{"content":{"parts":[{"text":"Hi"}]}}]}')
        'Hi'
    """
    try:
        parsed = json.loads(data)
    except (json.JSONDecodeError, TypeError):
        return None
    try:
        text = parsed["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) and text else None


def format_event(text: str) -> str:
    return f"{SSE_PREFIX}{json.dumps({'text': text}, ensure_ascii=False)}\n\n"


def reframe_sse(lines: Iterable[str]) -> Iterator[str]:
    """Re-frame upstream SSE lines into ``{"text": ...}`` events.

    Lines that are not data lines, ``[DONE]`` markers and payloads that
    are not valid JSON are skipped.
    """
    for line in lines:
        if not line or not line.startswith(SSE_PREFIX):
            continue
        data = line[len(SSE_PREFIX):]
        if data.strip() == SSE_DONE:
            continue
        text = extract_text(data)
        if text:
            yield format_event(text)


class ChatService:
    """Opens upstream streams and relays them."""

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def _url(self, method: str) -> str:
        return f"{settings.GEMINI_API_URL}/{settings.GEMINI_MODEL}:{method}"

    def open_stream(self, message: str, history: Optional[List[Dict[str, Any]]], api_key: str) -> requests.Response:
        """Start the upstream stream.

        Raises:
            UpstreamChatError: non-2xx status from the model API
            requests.RequestException: transport failure
        """
        metrics.increment('chat_requests')
        response = self.session.post(
            self._url("streamGenerateContent"),
            params={"alt": "sse", "key": api_key},
            json=build_payload(message, history),
            stream=True,
            timeout=settings.CHAT_TIMEOUT,
        )
        if not response.ok:
            body = response.text
            response.close()
            metrics.increment('chat_failures')
            logger.error(f"Gemini API error {response.status_code}: {body[:200]}")
            raise UpstreamChatError(response.status_code, body)
        return response

    def relay(self, response: requests.Response) -> Iterator[str]:
        """Yield re-framed events until the upstream stream ends."""
        metrics.increment('active_chat_streams')
        try:
            lines = response.iter_lines(decode_unicode=True)
            yield from reframe_sse(lines)
        except requests.RequestException as e:
            metrics.increment('chat_failures')
            logger.error(f"Chat stream interrupted: {e}")
            raise
        finally:
            metrics.decrement('active_chat_streams')
            response.close()

    def transcribe(self, audio: bytes, mime_type: str, api_key: str) -> str:
        """Transcribe a recorded utterance with inline audio.

        Raises:
            UpstreamChatError: non-2xx status from the model API
        """
        payload = {
            "contents": [{
                "role": "user",
                "parts": [
                    {"text": TRANSCRIBE_PROMPT},
                    {"inline_data": {
                        "mime_type": mime_type or "audio/wav",
                        "data": base64.b64encode(audio).decode("ascii"),
                    }},
                ],
            }],
        }
        response = self.session.post(
            self._url("generateContent"),
            params={"key": api_key},
            json=payload,
            timeout=settings.CHAT_TIMEOUT,
        )
        if not response.ok:
            logger.error(f"Transcription failed {response.status_code}: {response.text[:200]}")
            raise UpstreamChatError(response.status_code, response.text)
        return (extract_text(response.text) or "").strip()


_chat_service: Optional[ChatService] = None


def get_chat_service() -> ChatService:
    """Get shared chat service (FastAPI dependency)."""
    global _chat_service
    if _chat_service is None:
        _chat_service = ChatService()
    return _chat_service
