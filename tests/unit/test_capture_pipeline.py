# pylint: disable=missing-module-docstring,missing-function-docstring
import base64

import numpy as np

from audio.capture import CapturePipeline
from audio.frames import EncodedChunk
from conftest import RecordingTransport


def test_armed_block_reaches_both_sinks_identically() -> None:
    transport = RecordingTransport()
    delivered: list[EncodedChunk] = []
    pipeline = CapturePipeline(
        is_armed=lambda: True,
        speech_sink=delivered.append,
        transport=transport,
    )

    chunk = pipeline.on_tick(np.zeros(4096, dtype=np.float32))

    assert chunk is not None
    assert delivered == [chunk]
    assert transport.raw == [chunk.data]
    assert chunk.mime_type == "audio/pcm;rate=16000"
    assert base64.b64decode(chunk.data) == b"\x00" * 8192
    assert pipeline.frames_sent == 1


def test_disarmed_block_is_discarded() -> None:
    transport = RecordingTransport()
    delivered: list[EncodedChunk] = []
    pipeline = CapturePipeline(
        is_armed=lambda: False,
        speech_sink=delivered.append,
        transport=transport,
    )

    assert pipeline.on_tick(np.ones(4096) * 0.1) is None
    assert not delivered
    assert not transport.raw
    assert pipeline.frames_discarded == 1


def test_arming_is_read_per_block() -> None:
    armed = {"value": False}
    transport = RecordingTransport()
    pipeline = CapturePipeline(
        is_armed=lambda: armed["value"],
        speech_sink=lambda _chunk: None,
        transport=transport,
    )

    pipeline.on_tick(np.zeros(16))
    armed["value"] = True
    pipeline.on_tick(np.zeros(16))
    pipeline.on_tick(np.zeros(16))
    armed["value"] = False
    pipeline.on_tick(np.zeros(16))

    assert len(transport.raw) == 2
    assert pipeline.frames_sent == 2
    assert pipeline.frames_discarded == 2
