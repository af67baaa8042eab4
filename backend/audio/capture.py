"""
Push-to-talk capture pipeline.

One call to on_tick() per hardware input block. While armed, the block is
framed, encoded once and delivered to both sinks:

    microphone -> to_frame -> encode_frame -> speech sink (transcription)
                                           -> peer transport (raw audio)

While disarmed the block is discarded: nothing is sent, nothing is buffered.
Arming is a read of the session state at the moment the block arrives.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from numpy.typing import ArrayLike

from audio.frames import EncodedChunk
from audio.pcm import encode_frame, to_frame

if TYPE_CHECKING:
    from transport.base import PeerTransport


class CapturePipeline:
    """Fans armed microphone blocks out to transcription and the peer."""

    def __init__(
        self,
        *,
        is_armed: Callable[[], bool],
        speech_sink: Callable[[EncodedChunk], None],
        transport: PeerTransport,
    ) -> None:
        self._is_armed = is_armed
        self._speech_sink = speech_sink
        self._transport = transport

        self.frames_sent: int = 0
        self.frames_discarded: int = 0

    def on_tick(self, samples: ArrayLike) -> EncodedChunk | None:
        """
        Handle one captured block of float samples.

        Returns:
            The chunk that was delivered, or None if capture was disarmed.
        """
        if not self._is_armed():
            self.frames_discarded += 1
            return None

        chunk = encode_frame(to_frame(samples))

        self._speech_sink(chunk)
        self._transport.send_raw(chunk.data)

        self.frames_sent += 1
        return chunk
