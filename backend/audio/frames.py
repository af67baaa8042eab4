"""
Audio frame primitives.

Pure data containers only.
No queues, no timing logic, no devices.
"""

from __future__ import annotations
from dataclasses import dataclass

from constants import (
    AUDIO_CHANNELS,
    AUDIO_MIME_TYPE,
    AUDIO_SAMPLE_RATE_HZ,
    AUDIO_SAMPLE_WIDTH_BYTES,
)


@dataclass(frozen=True)
class AudioFrame:
    """
    Canonical audio frame moved between capture, transport and playback.

    pcm_bytes:
        Raw PCM16 little-endian samples, interleaved when channels > 1.
        Length MUST be a positive multiple of the sample width.

    sample_rate_hz:
        Samples per second per channel.

    channels:
        Interleaved channel count.
    """
    pcm_bytes: bytes
    sample_rate_hz: int = AUDIO_SAMPLE_RATE_HZ
    channels: int = AUDIO_CHANNELS

    def __post_init__(self) -> None:
        if self.sample_rate_hz <= 0:
            raise ValueError("sample_rate_hz must be > 0")
        if self.channels <= 0:
            raise ValueError("channels must be > 0")
        if len(self.pcm_bytes) % AUDIO_SAMPLE_WIDTH_BYTES != 0:
            raise ValueError(
                f"PCM length {len(self.pcm_bytes)} is not a multiple of "
                f"{AUDIO_SAMPLE_WIDTH_BYTES}"
            )
        if not self.pcm_bytes:
            raise ValueError("AudioFrame must hold at least one sample")

    @property
    def num_samples(self) -> int:
        """Total samples across all channels."""
        return len(self.pcm_bytes) // AUDIO_SAMPLE_WIDTH_BYTES

    @property
    def frame_count(self) -> int:
        """Samples per channel."""
        return self.num_samples // self.channels

    @property
    def duration_s(self) -> float:
        """Playback duration in seconds."""
        return self.frame_count / self.sample_rate_hz


@dataclass(frozen=True)
class EncodedChunk:
    """
    Transport-safe rendition of one AudioFrame.

    data:
        Base64 text of the frame's PCM bytes.

    mime_type:
        Format tag understood by the speech service.
    """
    data: str
    mime_type: str = AUDIO_MIME_TYPE
