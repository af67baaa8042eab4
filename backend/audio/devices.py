"""
PortAudio-backed input and output devices.

Microphone:
- open() acquires the input stream off the event loop (the "permission
  request"); any PortAudio refusal surfaces as PermissionDenied.
- start(on_frame) forwards every hardware block to the event loop with
  call_soon_threadsafe, so capture ticks are serialized with every other
  callback.

Speaker:
- Owns the audio clock: current_time is the number of rendered samples
  divided by the sample rate.
- play(channels, start_at) registers a clip at a sample offset; the
  PortAudio callback mixes all clips that overlap each output block.

Both devices release idempotently and are safe to release before open().
The PortAudio callback runs on its own thread, so clip bookkeeping is
guarded by a lock.
"""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass
from typing import Any, Callable, Sequence

import numpy as np

from constants import (
    AUDIO_CHANNELS,
    AUDIO_SAMPLE_RATE_HZ,
    CAPTURE_BLOCK_SAMPLES,
    CAPTURE_INPUT_CHANNELS,
)
from errors import PermissionDenied
from observability.logger import log_event, now_ms


StreamFactory = Callable[..., Any]


def _default_input_stream(**kwargs: Any) -> Any:
    # PortAudio is loaded on first device use.
    import sounddevice as sd  # pylint: disable=import-outside-toplevel
    return sd.InputStream(**kwargs)


def _default_output_stream(**kwargs: Any) -> Any:
    import sounddevice as sd  # pylint: disable=import-outside-toplevel
    return sd.OutputStream(**kwargs)


# ---------------------------------------------------------------------
# Microphone
# ---------------------------------------------------------------------

class Microphone:
    """Fixed-cadence mono microphone capture."""

    def __init__(
        self,
        *,
        sample_rate_hz: int = AUDIO_SAMPLE_RATE_HZ,
        block_samples: int = CAPTURE_BLOCK_SAMPLES,
        channels: int = CAPTURE_INPUT_CHANNELS,
        device: int | str | None = None,
        stream_factory: StreamFactory = _default_input_stream,
    ) -> None:
        self._sample_rate_hz = sample_rate_hz
        self._block_samples = block_samples
        self._channels = channels
        self._device = device
        self._stream_factory = stream_factory

        self._stream: Any = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._on_frame: Callable[[np.ndarray], None] | None = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    async def open(self) -> None:
        """
        Acquire the input device.

        Raises:
            PermissionDenied if PortAudio cannot open the device.
        """
        if self._stream is not None or self._closed:
            return

        self._loop = asyncio.get_running_loop()
        try:
            stream = await asyncio.to_thread(
                self._stream_factory,
                samplerate=self._sample_rate_hz,
                blocksize=self._block_samples,
                channels=self._channels,
                dtype="float32",
                device=self._device,
                callback=self._callback,
            )
        except Exception as e:  # pylint: disable=broad-exception-caught
            # sounddevice raises PortAudioError, OSError or ValueError here
            raise PermissionDenied(f"input device unavailable: {e}") from e

        self._stream = stream
        if self._closed:
            # Released while the device was being acquired
            self.stop()

    def start(self, on_frame: Callable[[np.ndarray], None]) -> None:
        """Begin delivering blocks to on_frame on the event loop."""
        if self._stream is None:
            raise RuntimeError("Microphone.start() called before open()")
        self._on_frame = on_frame
        self._stream.start()

    def stop(self) -> None:
        """Stop and close the input stream. Safe to call repeatedly."""
        self._closed = True
        self._on_frame = None
        stream = self._stream
        self._stream = None
        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except Exception as e:  # pylint: disable=broad-exception-caught
            log_event({
                "ts_ms": now_ms(),
                "event_type": "MIC_CLOSE_FAILED",
                "error": repr(e),
            })

    def _callback(self, indata: np.ndarray, frames: int, time_info: Any, status: Any) -> None:  # pylint: disable=unused-argument
        on_frame = self._on_frame
        loop = self._loop
        if on_frame is None or loop is None or loop.is_closed():
            return
        # First channel only; the buffer is reused by PortAudio after return.
        loop.call_soon_threadsafe(on_frame, indata[:, 0].copy())


# ---------------------------------------------------------------------
# Speaker
# ---------------------------------------------------------------------

@dataclass
class _Clip:
    start_sample: int
    samples: np.ndarray  # shape (frames, channels), float32


class Speaker:
    """Clock-driven output device with sample-accurate clip placement."""

    def __init__(
        self,
        *,
        sample_rate_hz: int = AUDIO_SAMPLE_RATE_HZ,
        channels: int = AUDIO_CHANNELS,
        device: int | str | None = None,
        stream_factory: StreamFactory = _default_output_stream,
    ) -> None:
        self._sample_rate_hz = sample_rate_hz
        self._channels = channels
        self._device = device
        self._stream_factory = stream_factory

        self._stream: Any = None
        self._lock = threading.Lock()
        self._clips: list[_Clip] = []
        self._rendered: int = 0
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    @property
    def current_time(self) -> float:
        """Seconds of audio rendered since open()."""
        with self._lock:
            return self._rendered / self._sample_rate_hz

    async def open(self) -> None:
        """Create and start the output stream off the event loop."""
        if self._stream is not None or self._closed:
            return
        stream = await asyncio.to_thread(self._start_stream)
        self._stream = stream
        if self._closed:
            # Released while the device was being acquired
            self.close()

    def _start_stream(self) -> Any:
        stream = self._stream_factory(
            samplerate=self._sample_rate_hz,
            channels=self._channels,
            dtype="float32",
            device=self._device,
            callback=self._render,
        )
        stream.start()
        return stream

    def play(self, channels: Sequence[np.ndarray], start_at: float) -> None:
        """Schedule per-channel float samples to begin at start_at seconds."""
        if not channels:
            return
        frame_count = min(len(c) for c in channels)
        block = np.zeros((frame_count, self._channels), dtype=np.float32)
        for out_channel in range(self._channels):
            # Mono input fans out to every output channel.
            source = channels[out_channel] if out_channel < len(channels) else channels[0]
            block[:, out_channel] = source[:frame_count]

        start_sample = int(round(start_at * self._sample_rate_hz))
        with self._lock:
            self._clips.append(_Clip(start_sample=start_sample, samples=block))

    def close(self) -> None:
        """Stop the output stream and drop pending clips. Safe to call repeatedly."""
        self._closed = True
        stream = self._stream
        self._stream = None
        with self._lock:
            self._clips.clear()
        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except Exception as e:  # pylint: disable=broad-exception-caught
            log_event({
                "ts_ms": now_ms(),
                "event_type": "SPEAKER_CLOSE_FAILED",
                "error": repr(e),
            })

    def _render(self, outdata: np.ndarray, frames: int, time_info: Any, status: Any) -> None:  # pylint: disable=unused-argument
        outdata.fill(0)
        with self._lock:
            block_start = self._rendered
            block_end = block_start + frames
            remaining: list[_Clip] = []

            for clip in self._clips:
                clip_end = clip.start_sample + len(clip.samples)
                if clip_end <= block_start:
                    continue
                if clip.start_sample < block_end:
                    lo = max(clip.start_sample, block_start)
                    hi = min(clip_end, block_end)
                    outdata[lo - block_start:hi - block_start] += (
                        clip.samples[lo - clip.start_sample:hi - clip.start_sample]
                    )
                if clip_end > block_end:
                    remaining.append(clip)

            self._clips = remaining
            self._rendered = block_end
