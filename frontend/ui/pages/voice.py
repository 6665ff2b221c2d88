"""Voice assistant page.

A live session loops: record a question, transcribe it on the API, stream
the reply, speak it with gTTS, wait SETTLE_DELAY, record again. The
recorder widget is only rendered while the coordinator is capturing, so
the assistant's own voice is never recorded.
"""

import io
import logging
import time
from typing import Optional

import streamlit as st
from gtts import gTTS, gTTSError

from frontend.config.settings import config
from frontend.services import get_api_client
from frontend.ui.pages.chat import send_message
from frontend.utils import SessionState
from frontend.utils.voice import VoiceCoordinator, clean_for_speech, estimate_speech_seconds

logger = logging.getLogger(__name__)


class RecorderWidget:
    """Microphone backed by st.audio_input.

    Each start gets a fresh widget key so a processed clip is never
    picked up again on the next rerun.
    """

    def __init__(self):
        self.generation = 0
        self.active = False

    @property
    def key(self) -> str:
        return f"voice_clip_{self.generation}"

    def start(self) -> None:
        self.generation += 1
        self.active = True

    def abort(self) -> None:
        self.active = False


def get_coordinator() -> VoiceCoordinator:
    """Coordinator for this browser session."""
    coordinator = SessionState.get('voice_coordinator')
    if coordinator is None:
        coordinator = VoiceCoordinator(RecorderWidget())
        SessionState.set('voice_coordinator', coordinator)
    return coordinator


def synthesize(text: str) -> Optional[bytes]:
    """MP3 bytes for the cleaned reply, or None when there is nothing to say."""
    spoken = clean_for_speech(text)
    if not spoken:
        return None
    buffer = io.BytesIO()
    gTTS(text=spoken, lang=config.TTS_LANGUAGE, tld=config.TTS_TLD).write_to_fp(buffer)
    return buffer.getvalue()


def render_voice_page() -> None:
    """Render the live voice conversation."""
    st.title("Voice Assistant")
    st.caption("Speak your question; the assistant answers aloud and then listens again.")

    coordinator = get_coordinator()

    col1, col2 = st.columns(2)
    with col1:
        if not coordinator.live and st.button("Start conversation", type="primary", use_container_width=True):
            coordinator.start_live()
            st.rerun()
    with col2:
        if coordinator.live and st.button("Stop", use_container_width=True):
            coordinator.stop_live()
            st.rerun()

    for message in SessionState.get_chat_messages()[-4:]:
        with st.chat_message(message["role"]):
            st.write(message["content"])

    if coordinator.capturing:
        _render_recorder(coordinator)

    _voice_ticker()


def _render_recorder(coordinator: VoiceCoordinator) -> None:
    recorder = coordinator.microphone
    clip = st.audio_input("Ask your question", key=recorder.key)
    if clip is None:
        return

    with st.spinner("Listening..."):
        result = get_api_client().transcribe(
            clip.getvalue(),
            mime_type=clip.type or "audio/wav",
            session_id=SessionState.get_session_id(),
        )

    text = (result.data or {}).get("text", "").strip() if result.success else ""
    if not text:
        if not result.success:
            st.warning(result.error or "Could not understand the recording")
        coordinator.on_no_speech()
        return

    coordinator.submit(text)
    _answer(coordinator, text)


def _answer(coordinator: VoiceCoordinator, text: str) -> None:
    reply = send_message(text)
    coordinator.response_complete(reply)
    if not coordinator.speaking:
        return

    try:
        audio = synthesize(reply)
    except gTTSError as e:
        logger.warning(f"Speech synthesis failed: {e}")
        audio = None

    if audio:
        st.audio(audio, format="audio/mp3", autoplay=True)
        coordinator.speech_finished(at=time.monotonic() + estimate_speech_seconds(reply))
    else:
        coordinator.speech_finished()


@st.fragment(run_every=config.VOICE_TICK_SECONDS)
def _voice_ticker() -> None:
    """Fire the coordinator's timers; rerun the page when capture resumes."""
    coordinator = get_coordinator()
    was_capturing = coordinator.capturing
    coordinator.tick()

    if coordinator.capturing:
        st.caption("🎙️ Listening")
    elif coordinator.processing:
        st.caption("Thinking...")
    elif coordinator.speaking or coordinator.seconds_until_resume() is not None:
        st.caption("🔊 Speaking")
    elif coordinator.live:
        st.caption("Waiting")

    if coordinator.capturing != was_capturing:
        st.rerun()
