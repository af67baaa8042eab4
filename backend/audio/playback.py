"""
Gapless playback scheduling for audio received from the peer.

Each chunk is decoded and placed on the output device's clock at

    start_at = max(next_start_time, output.current_time)

after which next_start_time advances by the chunk's duration. Chunks that
arrive faster than real time queue back to back; a late chunk starts "now"
and the gap is audible rather than scheduled in the past.

Invariants:
- next_start_time never decreases
- a chunk that fails to decode leaves next_start_time untouched
- this is the only component that calls OutputDeviceProtocol.play()

All calls happen on the event loop. The read and write of next_start_time
happen in one synchronous call, so no two chunks interleave.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from audio.pcm import decode_frame, from_frame
from constants import AUDIO_CHANNELS, AUDIO_SAMPLE_RATE_HZ
from errors import DecodeFailure
from observability.logger import log_event, now_ms

if TYPE_CHECKING:
    from orchestrator.runtime_context import OutputDeviceProtocol


class PlaybackScheduler:
    """Owns the playback cursor for one session."""

    def __init__(
        self,
        output: OutputDeviceProtocol,
        *,
        sample_rate_hz: int = AUDIO_SAMPLE_RATE_HZ,
        channels: int = AUDIO_CHANNELS,
        session_id: str | None = None,
    ) -> None:
        self._output = output
        self._sample_rate_hz = sample_rate_hz
        self._channels = channels
        self._session_id = session_id

        self._next_start_time: float = 0.0
        self.chunks_scheduled: int = 0
        self.chunks_dropped: int = 0

    @property
    def next_start_time(self) -> float:
        """Earliest time the next chunk may begin (audio clock seconds)."""
        return self._next_start_time

    def schedule(self, data: str) -> float | None:
        """
        Decode one transport chunk and schedule it for playback.

        Returns:
            The start time on the output clock, or None if the chunk was dropped.
        """
        if not self._output.is_open:
            self._drop("output_not_open", payload_len=len(data))
            return None

        try:
            frame = decode_frame(
                data,
                sample_rate_hz=self._sample_rate_hz,
                channels=self._channels,
            )
        except DecodeFailure as e:
            self._drop("decode_failed", payload_len=len(data), error=str(e))
            return None

        start_at = max(self._next_start_time, self._output.current_time)
        self._output.play(from_frame(frame, self._channels), start_at)
        self._next_start_time = start_at + frame.duration_s
        self.chunks_scheduled += 1

        return start_at

    def _drop(self, reason: str, **details: object) -> None:
        self.chunks_dropped += 1
        log_event({
            "ts_ms": now_ms(),
            "event_type": "PLAYBACK_CHUNK_DROPPED",
            "session_id": self._session_id,
            "reason": reason,
            "next_start_time": self._next_start_time,
            **details,
        })
