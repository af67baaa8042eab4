"""
Transcription relay.

Sits between the speech adapter and the rest of the session:

- forwards captured audio chunks to the open speech session
- accumulates partial input transcriptions into one utterance
- on turn completion, commits the utterance to the transcript log and sends
  it to the peers on the tagged protocol channel
- turns speech session lifecycle notifications into reducer events

The relay never decides state transitions; it only emits events.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from audio.frames import EncodedChunk
from context.transcript import Source, TranscriptLog
from observability.logger import log_event, now_ms
from orchestrator.events import (
    Event,
    EventType,
    SpeechSessionClosed,
    SpeechSessionFailed,
    SpeechSessionOpened,
)
from protocol.escaping import escape_parameter

if TYPE_CHECKING:
    from adapters.speech.base import SpeechAdapter
    from transport.base import PeerTransport


class TranscriptionRelay:
    """
    SpeechEventSink for one session.

    Invariants:
    - exactly one transcript entry and one tagged message per completed
      non-empty turn
    - the partial utterance is empty after every turn completion
    """

    def __init__(
        self,
        *,
        transcript: TranscriptLog,
        transport: PeerTransport,
        protocol_id: str,
        emit_event: Callable[[Event], None],
        session_id: str | None = None,
    ) -> None:
        self._transcript = transcript
        self._transport = transport
        self._protocol_id = protocol_id
        self._emit = emit_event
        self._session_id = session_id

        self._adapter: SpeechAdapter | None = None
        self._partial: str = ""

    @property
    def partial_utterance(self) -> str:
        return self._partial

    # ------------------------------------------------------------------
    # Audio path
    # ------------------------------------------------------------------

    def attach(self, adapter: SpeechAdapter | None) -> None:
        self._adapter = adapter

    def send_audio(self, chunk: EncodedChunk) -> None:
        if self._adapter is None:
            log_event({
                "ts_ms": now_ms(),
                "event_type": "SPEECH_AUDIO_DROPPED",
                "session_id": self._session_id,
                "reason": "no_adapter",
            })
            return
        self._adapter.send_audio(chunk)

    # ------------------------------------------------------------------
    # SpeechEventSink
    # ------------------------------------------------------------------

    def on_session_opened(self) -> None:
        self._emit(SpeechSessionOpened(
            event_type=EventType.SPEECH_SESSION_OPENED,
            ts_ms=now_ms(),
        ))

    def on_partial_transcription(self, text: str) -> None:
        self._partial += text

    def on_turn_complete(self) -> None:
        # Checked before trimming: a whitespace-only turn still commits
        # (as an empty entry), matching the host app's behavior.
        if not self._partial:
            return

        text = self._partial.strip()
        self._partial = ""

        self._transcript.append(Source.LOCAL, text)
        self._transport.send_tagged(self._protocol_id, escape_parameter(text))

        log_event({
            "ts_ms": now_ms(),
            "event_type": "UTTERANCE_RELAYED",
            "session_id": self._session_id,
            "protocol_id": self._protocol_id,
            "char_count": len(text),
        })

    def on_session_error(self, reason: str) -> None:
        self._emit(SpeechSessionFailed(
            event_type=EventType.SPEECH_SESSION_FAILED,
            ts_ms=now_ms(),
            reason=reason,
        ))

    def on_session_closed(self, reason: str | None) -> None:
        self._emit(SpeechSessionClosed(
            event_type=EventType.SPEECH_SESSION_CLOSED,
            ts_ms=now_ms(),
            reason=reason,
        ))
