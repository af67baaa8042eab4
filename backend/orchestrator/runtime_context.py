"""
Runtime execution context.

Provides Runtime with live access to session-owned imperative resources
needed for command execution (devices, speech adapter, capture pipeline).

This module contains:
- Narrow Protocols (capabilities, not implementations)
- Zero lifecycle logic
- Zero state mutation
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Protocol, Sequence, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from adapters.speech.base import SpeechAdapter, SpeechEventSink
    from audio.capture import CapturePipeline
    from orchestrator.state_dataclass import SessionStatus
    from session.walkie_session import WalkieSession


# ---------------------------------------------------------------------
# Device Protocols
# ---------------------------------------------------------------------

@runtime_checkable
class MicrophoneProtocol(Protocol):
    @property
    def is_open(self) -> bool: ...
    async def open(self) -> None:
        """Acquire the device. Raises PermissionDenied on refusal."""
    def start(self, on_frame: Callable[[np.ndarray], None]) -> None: ...
    def stop(self) -> None:
        """Idempotent; safe before open()."""


@runtime_checkable
class OutputDeviceProtocol(Protocol):
    @property
    def is_open(self) -> bool: ...
    @property
    def current_time(self) -> float:
        """Audio clock in seconds."""
    async def open(self) -> None: ...
    def play(self, channels: Sequence[np.ndarray], start_at: float) -> None: ...
    def close(self) -> None:
        """Idempotent; safe before open()."""


# ---------------------------------------------------------------------
# Runtime Execution Context
# ---------------------------------------------------------------------

class RuntimeExecutionContext:
    """
    Imperative execution context for Runtime.

    This object provides *live views* into session-owned resources
    so Runtime does not need to synchronize or cache anything.

    Runtime is allowed to:
    - Open, start and release devices and the speech session
    - Publish status to the display layer

    Runtime is NOT allowed to:
    - Mutate session-owned state directly
    - Make lifecycle decisions (the reducer does)
    """

    def __init__(self, session: WalkieSession) -> None:
        self.session = session

    # ----------------------------
    # Session metadata
    # ----------------------------

    @property
    def session_id(self) -> str:
        return self.session.session_id

    # ----------------------------
    # Devices
    # ----------------------------

    @property
    def microphone(self) -> MicrophoneProtocol:
        return self.session.microphone

    @property
    def speaker(self) -> OutputDeviceProtocol:
        return self.session.speaker

    # ----------------------------
    # Speech session
    # ----------------------------

    @property
    def speech_adapter(self) -> SpeechAdapter:
        return self.session.speech_adapter

    @property
    def speech_sink(self) -> SpeechEventSink:
        return self.session.relay

    @property
    def capture(self) -> CapturePipeline:
        return self.session.capture

    # ----------------------------
    # Side effects owned by the session
    # ----------------------------

    def publish_status(self, status: SessionStatus) -> None:
        self.session.publish_status(status)

    async def release_resources(self) -> None:
        await self.session.release_resources()
