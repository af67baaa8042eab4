"""
PCM conversion utilities.

- Float samples <-> PCM16 little-endian frames
- PCM bytes <-> base64 transport text

Runtime-safe, adapter-agnostic. No resampling. No channel mixing.
"""

from __future__ import annotations

import base64
import binascii

import numpy as np
from numpy.typing import ArrayLike

from audio.frames import AudioFrame, EncodedChunk
from constants import AUDIO_CHANNELS, AUDIO_MIME_TYPE, AUDIO_SAMPLE_RATE_HZ, PCM16_SCALE
from errors import DecodeFailure


def to_frame(
    samples: ArrayLike,
    *,
    sample_rate_hz: int = AUDIO_SAMPLE_RATE_HZ,
) -> AudioFrame:
    """
    Convert float samples in [-1.0, 1.0] to a mono PCM16 frame.

    Each sample is scaled by 32768 and truncated toward zero. There is no
    clamping: values that land outside int16 wrap modulo 2**16 (1.0 becomes
    -32768). NaN and infinities become 0.
    """
    scaled = np.asarray(samples, dtype=np.float64).reshape(-1) * PCM16_SCALE
    scaled = np.nan_to_num(scaled, nan=0.0, posinf=0.0, neginf=0.0)

    # int64 -> int16 narrowing wraps; float -> int16 directly is undefined.
    pcm = np.trunc(scaled).astype(np.int64).astype("<i2")
    return AudioFrame(pcm_bytes=pcm.tobytes(), sample_rate_hz=sample_rate_hz)


def from_frame(frame: AudioFrame, channel_count: int = AUDIO_CHANNELS) -> list[np.ndarray]:
    """
    Convert a PCM16 frame to one float32 array per channel in [-1.0, 1.0).

    Samples are de-interleaved by channel_count; trailing samples that do
    not fill a whole frame are ignored.
    """
    if channel_count <= 0:
        raise ValueError("channel_count must be > 0")

    audio_i16 = np.frombuffer(frame.pcm_bytes, dtype="<i2")
    frame_count = len(audio_i16) // channel_count
    interleaved = audio_i16[: frame_count * channel_count].reshape(frame_count, channel_count)

    return [
        interleaved[:, channel].astype(np.float32) / np.float32(PCM16_SCALE)
        for channel in range(channel_count)
    ]


def encode(data: bytes) -> str:
    """Encode bytes as base64 text."""
    return base64.b64encode(data).decode("ascii")


def decode(text: str) -> bytes:
    """
    Decode base64 text to bytes.

    Raises:
        DecodeFailure if the text is not canonical base64.
    """
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise DecodeFailure(f"invalid base64 payload: {e}") from e


def encode_frame(frame: AudioFrame, *, mime_type: str = AUDIO_MIME_TYPE) -> EncodedChunk:
    """Wrap a frame's bytes as a transport chunk."""
    return EncodedChunk(data=encode(frame.pcm_bytes), mime_type=mime_type)


def decode_frame(
    text: str,
    *,
    sample_rate_hz: int = AUDIO_SAMPLE_RATE_HZ,
    channels: int = AUDIO_CHANNELS,
) -> AudioFrame:
    """
    Decode transport text into an AudioFrame.

    Raises:
        DecodeFailure for malformed base64, an odd byte count or an empty payload.
    """
    pcm_bytes = decode(text)
    try:
        return AudioFrame(pcm_bytes=pcm_bytes, sample_rate_hz=sample_rate_hz, channels=channels)
    except ValueError as e:
        raise DecodeFailure(str(e)) from e

