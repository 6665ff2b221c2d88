"""
Chat proxy endpoints.

Errors on this router use an ``{"error": ...}`` body, which is what the
chat widgets read.

Rate Limiting:
- Per-session sliding window (X-Session-ID) on chat and transcription
"""
import logging
from typing import Optional

import requests
from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.concurrency import run_in_threadpool

from backend.config import settings, get_gemini_api_key
from backend.core.audit import log_rate_limit_exceeded
from backend.core.auth import truncate_session_id, validate_session_id
from backend.core.metrics import metrics
from backend.core.rate_limit import chat_rate_limiter
from backend.models.schemas import ChatRequest, TranscriptionResponse
from backend.services.chat_service import ChatService, UpstreamChatError, get_chat_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["Chat"])

MAX_AUDIO_BYTES = 10 * 1024 * 1024

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def _error(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def _route_limits() -> dict:
    return {
        "chat": (settings.RATE_LIMIT_MAX_CHATS, "messages"),
        "transcribe": (settings.RATE_LIMIT_MAX_TRANSCRIPTIONS, "recordings"),
    }


def _rate_limited(session_id: str, route: str) -> Optional[JSONResponse]:
    """Return a 429 response if the session is over its limit for ``route``, else None."""
    if not settings.RATE_LIMIT_ENABLED:
        return None
    limit, noun = _route_limits()[route]
    decision = chat_rate_limiter.hit(session_id, route, limit)
    if decision.allowed:
        return None
    metrics.increment('rate_limit_exceeded')
    log_rate_limit_exceeded(session_id, route, limit)
    logger.warning(
        f"{route} rate limit exceeded for session {truncate_session_id(session_id)}, "
        f"retry in {decision.retry_after}s"
    )
    return _error(
        429,
        f"Too many {noun}. Please wait a minute (max {limit} per minute).",
        headers={"Retry-After": str(decision.retry_after)},
    )


@router.post("")
def chat(
    body: ChatRequest,
    session_id: str = Depends(validate_session_id),
    service: ChatService = Depends(get_chat_service),
):
    """
    Stream an assistant reply as server-sent events.

    Each event is ``data: {"text": "<fragment>"}``; fragments arrive in
    the order the model produced them.
    """
    api_key = get_gemini_api_key()
    if not api_key:
        return _error(500, "Gemini API key not configured")

    if not body.message or not body.message.strip():
        return _error(400, "Message is required")

    limited = _rate_limited(session_id, "chat")
    if limited is not None:
        return limited

    history = [turn.model_dump() for turn in body.history]
    try:
        upstream = service.open_stream(body.message, history, api_key)
    except UpstreamChatError as e:
        return _error(e.status_code, e.message)
    except requests.RequestException as e:
        metrics.increment('chat_failures')
        logger.error(f"Chat upstream unreachable: {e}")
        return _error(500, "Internal server error")

    return StreamingResponse(
        service.relay(upstream),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.post("/transcribe", response_model=TranscriptionResponse)
async def transcribe(
    request: Request,
    content_type: str = Header("audio/wav"),
    session_id: str = Depends(validate_session_id),
    service: ChatService = Depends(get_chat_service),
):
    """Transcribe a recorded utterance (raw audio body)."""
    api_key = get_gemini_api_key()
    if not api_key:
        return _error(500, "Gemini API key not configured")

    audio = await request.body()
    if not audio:
        return _error(400, "Audio is required")
    if len(audio) > MAX_AUDIO_BYTES:
        return _error(413, "Recording is too long")

    limited = _rate_limited(session_id, "transcribe")
    if limited is not None:
        return limited

    try:
        text = await run_in_threadpool(
            service.transcribe, audio, content_type.split(";")[0].strip(), api_key
        )
    except UpstreamChatError as e:
        return _error(e.status_code, e.message)
    except requests.RequestException as e:
        logger.error(f"Transcription upstream unreachable: {e}")
        return _error(500, "Internal server error")

    return TranscriptionResponse(text=text)
