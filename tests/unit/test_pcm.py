# pylint: disable=missing-module-docstring,missing-function-docstring
import base64

import numpy as np
import pytest

from audio.frames import AudioFrame
from audio.pcm import decode, decode_frame, encode, encode_frame, from_frame, to_frame
from constants import AUDIO_MIME_TYPE
from errors import DecodeFailure


def _ints(frame: AudioFrame) -> list[int]:
    return np.frombuffer(frame.pcm_bytes, dtype="<i2").tolist()


def test_to_frame_scales_and_truncates_toward_zero() -> None:
    frame = to_frame([0.0, 0.5, -0.5, 0.00002, -0.00002, -1.0])

    assert _ints(frame) == [0, 16384, -16384, 0, 0, -32768]
    assert frame.num_samples == 6


def test_to_frame_full_scale_positive_wraps() -> None:
    # 1.0 * 32768 does not fit int16 and wraps, as the host app does
    assert _ints(to_frame([1.0])) == [-32768]


def test_to_frame_is_little_endian() -> None:
    assert to_frame([0.5]).pcm_bytes == b"\x00\x40"


def test_quantization_error_is_below_one_step() -> None:
    rng = np.random.default_rng(7)
    samples = rng.uniform(-1.0, 1.0 - 1e-9, size=4096)

    restored = from_frame(to_frame(samples))[0]

    assert restored.dtype == np.float32
    assert np.all(np.abs(restored - samples) < 1.0 / 32768 + 1e-7)


def test_from_frame_deinterleaves_channels() -> None:
    pcm = np.array([16384, -16384, 8192, -8192], dtype="<i2").tobytes()
    left, right = from_frame(AudioFrame(pcm_bytes=pcm, channels=2), channel_count=2)

    assert left.tolist() == [0.5, 0.25]
    assert right.tolist() == [-0.5, -0.25]


def test_from_frame_rejects_non_positive_channel_count() -> None:
    with pytest.raises(ValueError):
        from_frame(to_frame([0.1]), channel_count=0)


def test_encode_decode_round_trip_bytes() -> None:
    data = bytes(range(256))
    assert decode(encode(data)) == data


def test_empty_payload_round_trips_as_empty_text() -> None:
    assert encode(b"") == ""
    assert decode("") == b""


def test_decode_rejects_invalid_base64() -> None:
    with pytest.raises(DecodeFailure):
        decode("not base64!!")


def test_decode_frame_rejects_odd_length() -> None:
    with pytest.raises(DecodeFailure):
        decode_frame(base64.b64encode(b"\x01\x02\x03").decode())


def test_decode_frame_rejects_empty_payload() -> None:
    with pytest.raises(DecodeFailure):
        decode_frame("")


def test_encode_frame_tags_mime_type() -> None:
    frame = to_frame([0.25, -0.25])
    chunk = encode_frame(frame)

    assert chunk.mime_type == AUDIO_MIME_TYPE == "audio/pcm;rate=16000"
    assert decode_frame(chunk.data) == frame
