# pylint: disable=missing-module-docstring,missing-function-docstring,missing-class-docstring
from __future__ import annotations

from typing import Any, Callable, Sequence

import numpy as np
import pytest

from audio.frames import EncodedChunk
from config import AppConfig
from errors import ConnectionFailure, PermissionDenied
from observability import logger
from session.factory import SessionComponents
from transport.base import PeerTransport
from transport.host_bridge import HostBridgeTransport


# ---------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------

@pytest.fixture
def captured_logs(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Route the JSONL sink into a list."""
    lines: list[str] = []
    monkeypatch.setattr(logger, "_print", lines.append)
    monkeypatch.setattr(logger, "_enabled", True)
    return lines


# ---------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------

class FakeMicrophone:
    def __init__(self, *, refuse: bool = False) -> None:
        self.refuse = refuse
        self.opened = False
        self.stopped = 0
        self.on_frame: Callable[[np.ndarray], None] | None = None

    @property
    def is_open(self) -> bool:
        return self.opened and not self.stopped

    async def open(self) -> None:
        if self.refuse:
            raise PermissionDenied("denied by test")
        self.opened = True

    def start(self, on_frame: Callable[[np.ndarray], None]) -> None:
        self.on_frame = on_frame

    def stop(self) -> None:
        self.stopped += 1
        self.on_frame = None

    def tick(self, samples: Any) -> None:
        """Simulate one hardware block."""
        if self.on_frame is not None:
            self.on_frame(np.asarray(samples, dtype=np.float32))


class FakeSpeaker:
    def __init__(self, *, is_open: bool = True, current_time: float = 0.0) -> None:
        self._is_open = is_open
        self.current_time = current_time
        self.played: list[tuple[list[np.ndarray], float]] = []
        self.closed = 0

    @property
    def is_open(self) -> bool:
        return self._is_open

    async def open(self) -> None:
        self._is_open = True

    def play(self, channels: Sequence[np.ndarray], start_at: float) -> None:
        self.played.append((list(channels), start_at))

    def close(self) -> None:
        self.closed += 1
        self._is_open = False


class FakeSpeechAdapter:
    """Records audio; the test drives sink callbacks directly."""

    def __init__(self, *, fail_connect: bool = False, auto_open: bool = True) -> None:
        self.fail_connect = fail_connect
        self.auto_open = auto_open
        self.sink: Any = None
        self.sent: list[EncodedChunk] = []
        self.closed = 0

    async def open(self, sink: Any) -> None:
        if self.fail_connect:
            raise ConnectionFailure("connect refused by test")
        self.sink = sink
        if self.auto_open:
            sink.on_session_opened()

    def send_audio(self, chunk: EncodedChunk) -> None:
        self.sent.append(chunk)

    async def close(self) -> None:
        self.closed += 1


class RecordingTransport(PeerTransport):
    def __init__(self) -> None:
        super().__init__()
        self.raw: list[str] = []
        self.tagged: list[tuple[str, str]] = []
        self.storage_requests: list[str] = []
        self.storage: dict[str, Any] = {}

    def send_raw(self, data: str) -> None:
        self.raw.append(data)

    def send_tagged(self, protocol_id: str, data: str) -> None:
        self.tagged.append((protocol_id, data))

    def request_storage(self, key: str) -> None:
        self.storage_requests.append(key)

    def set_storage(self, key: str, value: Any) -> None:
        self.storage[key] = value


@pytest.fixture
def microphone() -> FakeMicrophone:
    return FakeMicrophone()


@pytest.fixture
def speaker() -> FakeSpeaker:
    return FakeSpeaker(is_open=False)


@pytest.fixture
def speech_adapter() -> FakeSpeechAdapter:
    return FakeSpeechAdapter()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


# ---------------------------------------------------------------------
# Config and session factory
# ---------------------------------------------------------------------

@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        gemini_api_key="test-key",
        gemini_model="test-model",
        gemini_voice="Zephyr",
        gemini_live_url="wss://example.test/live",
        protocol_id="com.ixilabs.spixi.walkie-talkie",
        loopback_transport=False,
        audio_input_device=None,
        audio_output_device=None,
        enable_json_logs=False,
    )


class FakeSessionFactory:
    """Hands out fake devices and a real HostBridgeTransport on the gateway queue."""

    def __init__(self) -> None:
        self.built: list[Any] = []

    def __call__(self, session_id: str, outbound: Any) -> SessionComponents:
        components = SessionComponents(
            microphone=FakeMicrophone(),
            speaker=FakeSpeaker(is_open=False),
            speech_adapter=FakeSpeechAdapter(),  # type: ignore[arg-type]
            transport=HostBridgeTransport(outbound),
        )
        self.built.append((session_id, components))
        return components


@pytest.fixture
def session_factory() -> FakeSessionFactory:
    return FakeSessionFactory()
