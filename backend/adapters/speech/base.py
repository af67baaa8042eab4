"""
Speech session adapter contract.

This module defines the *interface only*: no retries, no buffering policy,
no lifecycle decisions live here.

Key invariants:
- The adapter reports what the remote service says through a SpeechEventSink;
  it never calls the reducer or touches session state.
- send_audio() never blocks the capture path and preserves chunk order.
- close() is idempotent and safe before open(); no sink callbacks are made
  after close() returns.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol

from audio.frames import EncodedChunk


class SpeechEventSink(Protocol):
    """Typed dispatch interface for speech service messages."""

    def on_session_opened(self) -> None: ...
    def on_partial_transcription(self, text: str) -> None: ...
    def on_turn_complete(self) -> None: ...
    def on_session_error(self, reason: str) -> None: ...
    def on_session_closed(self, reason: str | None) -> None: ...


class SpeechAdapter(ABC):
    """
    Abstract interface for a streaming speech-to-text session.

    Implementations are responsible for:
    - Establishing one session per open() call
    - Forwarding encoded audio chunks in order
    - Translating service messages into SpeechEventSink calls

    Non-responsibilities:
    - No push-to-talk gating (capture decides what to send)
    - No transcript accumulation (the relay does)
    - No reconnects
    """

    @abstractmethod
    async def open(self, sink: SpeechEventSink) -> None:
        """
        Connect and send the session setup.

        Returning does NOT mean the session is usable: readiness is reported
        later through sink.on_session_opened().

        Raises:
            ConnectionFailure if the service cannot be reached.
        """
        raise NotImplementedError

    @abstractmethod
    def send_audio(self, chunk: EncodedChunk) -> None:
        """Queue one encoded chunk. Chunks sent while not open are dropped."""
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        """Close the session. Idempotent."""
        raise NotImplementedError
