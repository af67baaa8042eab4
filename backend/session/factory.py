"""
Session collaborator construction.

The gateway never builds devices, speech adapters or transports itself; it
asks a SessionFactory. Production wiring lives in build_session_factory();
tests pass their own factory with fakes.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Protocol

from adapters.speech.base import SpeechAdapter
from adapters.speech.gemini_live import GeminiLiveAdapter
from audio.devices import Microphone, Speaker
from config import AppConfig
from orchestrator.runtime_context import MicrophoneProtocol, OutputDeviceProtocol
from transport.base import PeerTransport
from transport.host_bridge import HostBridgeTransport
from transport.loopback import LoopbackTransport


@dataclass(frozen=True)
class SessionComponents:
    """Per-session side-effectful collaborators."""
    microphone: MicrophoneProtocol
    speaker: OutputDeviceProtocol
    speech_adapter: SpeechAdapter
    transport: PeerTransport


class SessionFactory(Protocol):
    def __call__(
        self,
        session_id: str,
        outbound: asyncio.Queue[dict[str, Any]],
    ) -> SessionComponents: ...


def build_session_factory(config: AppConfig) -> SessionFactory:
    """Production factory: PortAudio devices, Gemini Live, host bridge or loopback."""
    if not config.gemini_api_key:
        raise RuntimeError("GEMINI_API_KEY environment variable not set")
    api_key = config.gemini_api_key

    def factory(
        session_id: str,
        outbound: asyncio.Queue[dict[str, Any]],
    ) -> SessionComponents:
        transport: PeerTransport
        if config.loopback_transport:
            transport = LoopbackTransport()
        else:
            transport = HostBridgeTransport(outbound)

        return SessionComponents(
            microphone=Microphone(device=config.audio_input_device),
            speaker=Speaker(device=config.audio_output_device),
            speech_adapter=GeminiLiveAdapter(
                api_key=api_key,
                model=config.gemini_model,
                voice=config.gemini_voice,
                url=config.gemini_live_url,
                session_id=session_id,
            ),
            transport=transport,
        )

    return factory
