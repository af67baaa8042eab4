"""
Walkie-talkie session container.

One WalkieSession per host session. It owns every per-session component and
wires them together:

    microphone -> CapturePipeline -> TranscriptionRelay -> speech adapter
                                  -> PeerTransport (raw audio)
    PeerTransport (raw audio)      -> PlaybackScheduler -> speaker
    PeerTransport (tagged text)    -> TranscriptLog (peer entries)
    speech adapter events          -> TranscriptionRelay -> Runtime

The Runtime owns the lifecycle status; this object holds no state machine
logic of its own.
"""

from __future__ import annotations

from typing import Any, Callable

from adapters.speech.base import SpeechAdapter
from audio.capture import CapturePipeline
from audio.playback import PlaybackScheduler
from context.transcript import Source, TranscriptEntry, TranscriptLog
from observability.logger import log_event, now_ms
from orchestrator.events import (
    EventType,
    InitRequested,
    TalkPressed,
    TalkReleased,
    TeardownRequested,
)
from orchestrator.runtime import Runtime
from orchestrator.runtime_context import (
    MicrophoneProtocol,
    OutputDeviceProtocol,
    RuntimeExecutionContext,
)
from orchestrator.state_dataclass import SessionStatus
from orchestrator.status import is_armed
from protocol.escaping import unescape_parameter
from transcription.relay import TranscriptionRelay
from transport.base import PeerTransport


StatusListener = Callable[[SessionStatus], None]
TranscriptListener = Callable[[TranscriptEntry], None]


class WalkieSession:
    """Mutable runtime container for a single walkie-talkie session."""

    def __init__(
        self,
        session_id: str,
        *,
        microphone: MicrophoneProtocol,
        speaker: OutputDeviceProtocol,
        speech_adapter: SpeechAdapter,
        transport: PeerTransport,
        protocol_id: str,
        on_status: StatusListener | None = None,
        on_transcript: TranscriptListener | None = None,
    ) -> None:
        self.session_id = session_id
        self.protocol_id = protocol_id

        self.microphone = microphone
        self.speaker = speaker
        self.speech_adapter = speech_adapter
        self.transport = transport

        self._on_status = on_status
        self._released = False

        self.transcript = TranscriptLog(session_id=session_id, on_append=on_transcript)
        self.runtime = Runtime(context=RuntimeExecutionContext(self))

        self.relay = TranscriptionRelay(
            transcript=self.transcript,
            transport=transport,
            protocol_id=protocol_id,
            emit_event=self.runtime.dispatch,
            session_id=session_id,
        )
        self.relay.attach(speech_adapter)

        self.capture = CapturePipeline(
            is_armed=lambda: is_armed(self.runtime.status),
            speech_sink=self.relay.send_audio,
            transport=transport,
        )
        self.scheduler = PlaybackScheduler(speaker, session_id=session_id)

        transport.bind(self)

    # ------------------------------------------------------------------
    # Host-facing controls
    # ------------------------------------------------------------------

    @property
    def status(self) -> SessionStatus:
        return self.runtime.status

    def start(self, peer_addresses: tuple[str, ...] = ()) -> None:
        """Begin initialization (host onInit)."""
        self.runtime.dispatch(InitRequested(
            event_type=EventType.INIT_REQUESTED,
            ts_ms=now_ms(),
            session_id=self.session_id,
            peer_addresses=peer_addresses,
        ))

    def press(self) -> None:
        self.runtime.dispatch(TalkPressed(event_type=EventType.TALK_PRESSED, ts_ms=now_ms()))

    def release(self) -> None:
        self.runtime.dispatch(TalkReleased(event_type=EventType.TALK_RELEASED, ts_ms=now_ms()))

    async def close(self, reason: str | None = None) -> None:
        """Tear down and wait for every outstanding side effect."""
        self.runtime.dispatch(TeardownRequested(
            event_type=EventType.TEARDOWN_REQUESTED,
            ts_ms=now_ms(),
            reason=reason,
        ))
        await self.runtime.shutdown()

    # ------------------------------------------------------------------
    # Side effects requested by Runtime
    # ------------------------------------------------------------------

    def publish_status(self, status: SessionStatus) -> None:
        if self._on_status is not None:
            self._on_status(status)

    async def release_resources(self) -> None:
        """
        Release the microphone, output device, speech session and pending
        peer sends.

        Runs at most once. Each release is independent: a failure in one is
        logged and does not prevent the others.
        """
        if self._released:
            return
        self._released = True

        self.relay.attach(None)
        self.transport.bind(None)
        self.transport.close()

        try:
            self.microphone.stop()
        except Exception as e:  # pylint: disable=broad-exception-caught
            self._log_release_failure("microphone", e)

        try:
            self.speaker.close()
        except Exception as e:  # pylint: disable=broad-exception-caught
            self._log_release_failure("speaker", e)

        try:
            await self.speech_adapter.close()
        except Exception as e:  # pylint: disable=broad-exception-caught
            self._log_release_failure("speech_session", e)

        log_event({
            "ts_ms": now_ms(),
            "event_type": "SESSION_RESOURCES_RELEASED",
            "session_id": self.session_id,
            "state": self.status.state.value,
            "frames_sent": self.capture.frames_sent,
            "chunks_scheduled": self.scheduler.chunks_scheduled,
            "chunks_dropped": self.scheduler.chunks_dropped,
        })

    def _log_release_failure(self, resource: str, exc: Exception) -> None:
        log_event({
            "ts_ms": now_ms(),
            "event_type": "RESOURCE_RELEASE_FAILED",
            "session_id": self.session_id,
            "resource": resource,
            "exception": type(exc).__name__,
            "message": str(exc),
        })

    # ------------------------------------------------------------------
    # InboundSink
    # ------------------------------------------------------------------

    def on_network_data(self, sender: str, data: Any) -> None:
        if not isinstance(data, str):
            self._log_inbound_drop(sender, "non_text_payload")
            return
        self.scheduler.schedule(data)

    def on_network_protocol_data(self, sender: str, protocol_id: str, data: Any) -> None:
        if protocol_id != self.protocol_id:
            log_event({
                "ts_ms": now_ms(),
                "event_type": "PROTOCOL_MISMATCH_IGNORED",
                "session_id": self.session_id,
                "sender": sender,
                "protocol_id": protocol_id,
            })
            return

        if not isinstance(data, str):
            self._log_inbound_drop(sender, "non_text_payload")
            return

        self.transcript.append(Source.PEER, unescape_parameter(data).strip())

    def on_storage_data(self, key: str, value: Any) -> None:
        log_event({
            "ts_ms": now_ms(),
            "event_type": "STORAGE_DATA_RECEIVED",
            "session_id": self.session_id,
            "key": key,
            "has_value": value is not None,
        })

    def _log_inbound_drop(self, sender: str, reason: str) -> None:
        log_event({
            "ts_ms": now_ms(),
            "event_type": "INBOUND_PAYLOAD_DROPPED",
            "session_id": self.session_id,
            "sender": sender,
            "reason": reason,
        })
