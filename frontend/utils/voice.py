"""Voice conversation coordinator.

Keeps the microphone and the assistant's speech mutually exclusive so
the assistant never hears its own voice as new input.

States:
    idle        live session off, or waiting to resume after speaking
    listening   microphone capturing
    processing  utterance submitted, response streaming
    speaking    response being played back

The microphone is never capturing while processing or speaking. After
playback (or an empty/failed response) capture resumes only once
SETTLE_DELAY has passed and only if the live session is still on.

Time is injected (``clock``) and timers fire from ``tick()``, so the
Streamlit page can drive the machine on reruns and tests can drive it
with a fake clock.
"""
import logging
import re
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Protocol

logger = logging.getLogger(__name__)

SILENCE_TIMEOUT = 2.0  # Wait after a final transcript before submitting
SETTLE_DELAY = 2.0  # Wait after the assistant finishes before listening again
NO_SPEECH_RESTART = 0.5  # Restart delay after a no-speech timeout

_TIMER_SILENCE = "silence"
_TIMER_RESUME = "resume"
_TIMER_SPEECH_END = "speech_end"

_SPEECH_MARKERS = re.compile("[🙏💰📱✅🚫👥🗓️💬📊📋*#]")
_BOLD = re.compile(r"\*\*(.*?)\*\*")
_ITALIC = re.compile(r"\*(.*?)\*")


class VoiceState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    PROCESSING = "processing"
    SPEAKING = "speaking"


class Microphone(Protocol):
    """Capture device controlled by the coordinator."""

    def start(self) -> None: ...

    def abort(self) -> None: ...


@dataclass
class _Timer:
    due: float
    action: Callable[[], None]


class VoiceCoordinator:
    """Explicit state machine guarding the microphone."""

    def __init__(
        self,
        microphone: Microphone,
        clock: Callable[[], float] = time.monotonic,
        on_submit: Optional[Callable[[str], None]] = None,
    ):
        self._mic = microphone
        self._clock = clock
        self._on_submit = on_submit
        self._timers: Dict[str, _Timer] = {}
        self._pending_utterance = ""
        self.live = False
        self.capturing = False
        self.state = VoiceState.IDLE
        self.transcript = ""

    @property
    def microphone(self) -> Microphone:
        return self._mic

    # Derived flags
    @property
    def listening(self) -> bool:
        return self.capturing

    @property
    def processing(self) -> bool:
        return self.state == VoiceState.PROCESSING

    @property
    def speaking(self) -> bool:
        return self.state == VoiceState.SPEAKING

    @property
    def busy(self) -> bool:
        return self.processing or self.speaking

    def seconds_until_resume(self) -> Optional[float]:
        timer = self._timers.get(_TIMER_RESUME)
        if timer is None:
            return None
        return max(0.0, timer.due - self._clock())

    # Session control
    def start_live(self) -> None:
        self.live = True
        self._start_capture()

    def stop_live(self) -> None:
        self.live = False
        self._timers.clear()
        self._stop_capture()
        self.state = VoiceState.IDLE
        self.transcript = ""
        self._pending_utterance = ""

    # Recognition events
    def on_transcript(self, text: str, final: bool) -> None:
        """Handle an interim or final transcript from the recogniser."""
        if self.state != VoiceState.LISTENING:
            return
        self.transcript = text
        if final and text.strip():
            self._pending_utterance = text.strip()
            self._arm(_TIMER_SILENCE, SILENCE_TIMEOUT, self._submit_pending)

    def on_no_speech(self) -> None:
        """The recogniser stopped after hearing nothing."""
        self.capturing = False
        if self.live and not self.busy:
            self._arm(_TIMER_RESUME, NO_SPEECH_RESTART, self._resume)

    def submit(self, text: str) -> str:
        """Submit an utterance; capture stops until the reply is spoken."""
        self._timers.pop(_TIMER_SILENCE, None)
        self._timers.pop(_TIMER_RESUME, None)
        self._timers.pop(_TIMER_SPEECH_END, None)
        self.state = VoiceState.PROCESSING
        self._stop_capture()
        self.transcript = ""
        self._pending_utterance = ""
        logger.debug("Voice utterance submitted")
        if self._on_submit:
            self._on_submit(text)
        return text

    # Response events
    def response_complete(self, text: str) -> None:
        """The streamed reply finished; speak it if there is anything to say."""
        if self.state != VoiceState.PROCESSING:
            return
        if clean_for_speech(text):
            self.state = VoiceState.SPEAKING
        else:
            self._settle(self._clock())

    def response_failed(self) -> None:
        if self.state == VoiceState.PROCESSING:
            self._settle(self._clock())

    def speech_finished(self, at: Optional[float] = None) -> None:
        """Playback ended, or will end at ``at``.

        A future ``at`` keeps the machine speaking until a timer fires at
        that moment; the settle delay is counted from there.
        """
        if self.state != VoiceState.SPEAKING:
            return
        now = self._clock()
        if at is None or at <= now:
            self._settle(now if at is None else at)
            return
        self._arm(_TIMER_SPEECH_END, 0.0, lambda: self._speech_ended(at), base=at)

    def tick(self, now: Optional[float] = None) -> None:
        """Fire every timer that is due."""
        now = self._clock() if now is None else now
        due = sorted(
            (name for name, timer in self._timers.items() if timer.due <= now),
            key=lambda name: self._timers[name].due,
        )
        for name in due:
            timer = self._timers.pop(name, None)
            if timer is not None:
                timer.action()

    # Internals
    def _arm(self, name: str, delay: float, action: Callable[[], None], base: Optional[float] = None) -> None:
        start = self._clock() if base is None else base
        self._timers[name] = _Timer(due=start + delay, action=action)

    def _settle(self, base: float) -> None:
        self.state = VoiceState.IDLE
        self._stop_capture()
        self._arm(_TIMER_RESUME, SETTLE_DELAY, self._resume, base=base)

    def _speech_ended(self, at: float) -> None:
        if self.state == VoiceState.SPEAKING:
            self._settle(at)

    def _submit_pending(self) -> None:
        if self.state == VoiceState.LISTENING and self._pending_utterance:
            self.submit(self._pending_utterance)

    def _resume(self) -> None:
        if self.live and not self.busy:
            self._start_capture()

    def _start_capture(self) -> None:
        if self.busy:
            return
        if not self.capturing:
            self._mic.start()
            self.capturing = True
        self.state = VoiceState.LISTENING

    def _stop_capture(self) -> None:
        if self.capturing:
            self._mic.abort()
            self.capturing = False


def strip_markdown(text: str) -> str:
    """Drop **bold** and *italic* markers from streamed text."""
    return _ITALIC.sub(r"\1", _BOLD.sub(r"\1", text))


def clean_for_speech(text: str) -> str:
    """Prepare a reply for text-to-speech."""
    cleaned = _SPEECH_MARKERS.sub("", text or "")
    cleaned = cleaned.replace("•", "")
    cleaned = re.sub(r"\n+", ". ", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned)
    return strip_markdown(cleaned).strip()


def estimate_speech_seconds(text: str, words_per_second: float = 2.5) -> float:
    """Rough playback length used when the player cannot report its end."""
    words = len(clean_for_speech(text).split())
    return words / words_per_second if words else 0.0
