"""
Unit tests for the voice conversation coordinator.

The coordinator is driven with a fake clock; timers only fire on tick().
"""
import pytest


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeMicrophone:
    def __init__(self):
        self.starts = 0
        self.aborts = 0

    def start(self):
        self.starts += 1

    def abort(self):
        self.aborts += 1


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mic():
    return FakeMicrophone()


@pytest.fixture
def coordinator(mic, clock):
    from frontend.utils.voice import VoiceCoordinator

    submitted = []
    coordinator = VoiceCoordinator(mic, clock=clock, on_submit=submitted.append)
    coordinator.submitted = submitted
    return coordinator


def _speak_reply(coordinator, clock, utterance="When is Annadanam?"):
    """Run one turn up to the point where the reply is being spoken."""
    coordinator.on_transcript(utterance, final=True)
    clock.now += 2.0
    coordinator.tick()
    coordinator.response_complete("Annadanam is served from 1 PM.")


class TestListening:
    """Tests for capture and submission."""

    def test_start_live_opens_microphone(self, coordinator, mic):
        coordinator.start_live()

        assert coordinator.live is True
        assert coordinator.capturing is True
        assert coordinator.listening is True
        assert mic.starts == 1

    def test_final_transcript_waits_for_silence(self, coordinator, clock):
        coordinator.start_live()
        coordinator.on_transcript("When is Annadanam?", final=True)

        clock.now += 1.9
        coordinator.tick()
        assert coordinator.submitted == []

        clock.now += 0.1
        coordinator.tick()
        assert coordinator.submitted == ["When is Annadanam?"]
        assert coordinator.processing is True

    def test_submit_stops_capture(self, coordinator, mic, clock):
        coordinator.start_live()
        coordinator.on_transcript("Timings?", final=True)
        clock.now += 2.0
        coordinator.tick()

        assert coordinator.capturing is False
        assert mic.aborts == 1

    def test_interim_transcript_does_not_submit(self, coordinator, clock):
        coordinator.start_live()
        coordinator.on_transcript("When is", final=False)

        clock.now += 5.0
        coordinator.tick()
        assert coordinator.submitted == []
        assert coordinator.transcript == "When is"

    def test_no_speech_restarts_quickly(self, coordinator, mic, clock):
        coordinator.start_live()
        coordinator.on_no_speech()
        assert coordinator.capturing is False

        clock.now += 0.5
        coordinator.tick()
        assert coordinator.capturing is True
        assert mic.starts == 2


class TestMicrophoneExclusion:
    """The microphone never captures while processing or speaking."""

    def test_cannot_start_capture_while_processing(self, coordinator, mic):
        coordinator.submit("typed question")
        coordinator.start_live()

        assert coordinator.capturing is False
        assert mic.starts == 0

    def test_stays_closed_while_speaking(self, coordinator, clock):
        coordinator.start_live()
        _speak_reply(coordinator, clock)

        assert coordinator.speaking is True
        clock.now += 30.0
        coordinator.tick()
        assert coordinator.capturing is False

    def test_resumes_after_settle_delay(self, coordinator, mic, clock):
        coordinator.start_live()
        _speak_reply(coordinator, clock)

        finished_at = clock.now + 4.0
        coordinator.speech_finished(at=finished_at)
        assert coordinator.speaking is True

        clock.now = finished_at + 1.9
        coordinator.tick()
        assert coordinator.capturing is False

        clock.now = finished_at + 2.0
        coordinator.tick()
        assert coordinator.capturing is True
        assert mic.starts == 2

    def test_speaking_until_playback_ends(self, coordinator, mic, clock):
        from frontend.utils.voice import VoiceState

        coordinator.start_live()
        coordinator.submit("When is Annadanam?")
        coordinator.response_complete("It is served at 1 PM.")
        ends_at = clock.now + 10.0
        coordinator.speech_finished(at=ends_at)

        clock.now += 1.0
        coordinator.tick()
        assert coordinator.speaking is True
        assert coordinator.state == VoiceState.SPEAKING
        assert coordinator.seconds_until_resume() is None

        clock.now = ends_at
        coordinator.tick()
        assert coordinator.speaking is False
        assert coordinator.state == VoiceState.IDLE
        assert coordinator.capturing is False
        assert coordinator.seconds_until_resume() == pytest.approx(2.0)

        clock.now = ends_at + 2.0
        coordinator.tick()
        assert coordinator.capturing is True
        assert mic.starts == 2

    def test_new_question_cancels_pending_playback_end(self, coordinator, clock):
        coordinator.start_live()
        _speak_reply(coordinator, clock)
        coordinator.speech_finished(at=clock.now + 5.0)

        coordinator.submit("And dinner?")
        clock.now += 6.0
        coordinator.tick()
        assert coordinator.processing is True

    def test_empty_reply_skips_speaking(self, coordinator, clock):
        coordinator.start_live()
        coordinator.submit("hello")
        coordinator.response_complete("🙏 **")

        assert coordinator.speaking is False
        assert coordinator.seconds_until_resume() == pytest.approx(2.0)

    def test_failed_reply_resumes(self, coordinator, clock):
        coordinator.start_live()
        coordinator.submit("hello")
        coordinator.response_failed()

        clock.now += 2.0
        coordinator.tick()
        assert coordinator.capturing is True

    def test_stop_live_cancels_resume(self, coordinator, clock):
        coordinator.start_live()
        _speak_reply(coordinator, clock)
        coordinator.speech_finished()
        coordinator.stop_live()

        clock.now += 10.0
        coordinator.tick()
        assert coordinator.capturing is False
        assert coordinator.live is False


class TestTextHelpers:
    """Tests for markdown stripping and speech cleanup."""

    def test_strip_markdown(self):
        from frontend.utils.voice import strip_markdown
        assert strip_markdown("**Annadanam** is *free*") == "Annadanam is free"

    def test_clean_for_speech_joins_lines(self):
        from frontend.utils.voice import clean_for_speech
        assert clean_for_speech("Line one\nLine two") == "Line one. Line two"

    def test_clean_for_speech_drops_emoji_and_markers(self):
        from frontend.utils.voice import clean_for_speech
        assert clean_for_speech("🙏 **Timings**: 1 PM") == "Timings: 1 PM"
        assert clean_for_speech("🙏") == ""

    def test_estimate_speech_seconds(self):
        from frontend.utils.voice import estimate_speech_seconds
        assert estimate_speech_seconds("one two three four five") == pytest.approx(2.0)
        assert estimate_speech_seconds("") == 0.0
