# pylint: disable=missing-module-docstring,missing-function-docstring
import pytest

from audio.frames import EncodedChunk
from conftest import FakeSpeechAdapter, RecordingTransport
from context.transcript import Source, TranscriptLog
from orchestrator.events import (
    Event,
    SpeechSessionClosed,
    SpeechSessionFailed,
    SpeechSessionOpened,
)
from transcription.relay import TranscriptionRelay

PROTOCOL = "com.ixilabs.spixi.walkie-talkie"


@pytest.fixture
def emitted() -> list[Event]:
    return []


@pytest.fixture
def relay(transport: RecordingTransport, emitted: list[Event]) -> TranscriptionRelay:
    return TranscriptionRelay(
        transcript=TranscriptLog(),
        transport=transport,
        protocol_id=PROTOCOL,
        emit_event=emitted.append,
    )


def _texts(relay: TranscriptionRelay) -> list[str]:
    return [e.text for e in relay._transcript]  # pylint: disable=protected-access


def test_partials_accumulate_into_one_utterance(
    relay: TranscriptionRelay, transport: RecordingTransport
) -> None:
    for part in ("Hel", "lo ", "world"):
        relay.on_partial_transcription(part)
    assert relay.partial_utterance == "Hello world"

    relay.on_turn_complete()

    assert _texts(relay) == ["Hello world"]
    assert transport.tagged == [(PROTOCOL, "Hello world")]
    assert relay.partial_utterance == ""


def test_relayed_text_is_trimmed_and_escaped(
    relay: TranscriptionRelay, transport: RecordingTransport
) -> None:
    relay.on_partial_transcription("  fish & <chips>  ")
    relay.on_turn_complete()

    assert _texts(relay) == ["fish & <chips>"]
    assert transport.tagged == [(PROTOCOL, "fish &amp; &lt;chips&gt;")]


def test_empty_turn_is_a_no_op(relay: TranscriptionRelay, transport: RecordingTransport) -> None:
    relay.on_turn_complete()

    assert _texts(relay) == []
    assert transport.tagged == []


def test_whitespace_only_turn_commits_an_empty_entry(
    relay: TranscriptionRelay, transport: RecordingTransport
) -> None:
    relay.on_partial_transcription("   ")
    relay.on_turn_complete()

    assert _texts(relay) == [""]
    assert transport.tagged == [(PROTOCOL, "")]


def test_each_turn_produces_one_entry(relay: TranscriptionRelay) -> None:
    relay.on_partial_transcription("one")
    relay.on_turn_complete()
    relay.on_turn_complete()
    relay.on_partial_transcription("two")
    relay.on_turn_complete()

    entries = list(relay._transcript)  # pylint: disable=protected-access
    assert [(e.source, e.text) for e in entries] == [(Source.LOCAL, "one"), (Source.LOCAL, "two")]


def test_lifecycle_notifications_become_events(
    relay: TranscriptionRelay, emitted: list[Event]
) -> None:
    relay.on_session_opened()
    relay.on_session_error("bad frame")
    relay.on_session_closed("bye")

    assert isinstance(emitted[0], SpeechSessionOpened)
    assert isinstance(emitted[1], SpeechSessionFailed)
    assert emitted[1].reason == "bad frame"
    assert isinstance(emitted[2], SpeechSessionClosed)
    assert emitted[2].reason == "bye"


def test_audio_goes_to_attached_adapter_only(relay: TranscriptionRelay) -> None:
    chunk = EncodedChunk(data="AAA=")
    relay.send_audio(chunk)

    adapter = FakeSpeechAdapter()
    relay.attach(adapter)  # type: ignore[arg-type]
    relay.send_audio(chunk)
    relay.attach(None)
    relay.send_audio(chunk)

    assert adapter.sent == [chunk]
