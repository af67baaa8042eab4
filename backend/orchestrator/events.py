"""
Event definitions for the session reducer.

Rules:
- Events describe facts that have occurred.
- Events carry data only (no behavior).
- All reducer decisions are based on these events.
- No clocks, no timers, no async, no side effects.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# =============================================================================
# Event Type Enumeration
# =============================================================================

class EventType(str, Enum):
    """
    Canonical event types understood by the reducer.

    Every (state, event_type) pair must be explicitly handled
    or explicitly ignored by the reducer.
    """

    # ------------------------------------------------------------------
    # Host lifecycle
    # ------------------------------------------------------------------
    INIT_REQUESTED = "INIT_REQUESTED"
    TEARDOWN_REQUESTED = "TEARDOWN_REQUESTED"

    # ------------------------------------------------------------------
    # Microphone permission
    # ------------------------------------------------------------------
    PERMISSION_GRANTED = "PERMISSION_GRANTED"
    PERMISSION_REFUSED = "PERMISSION_REFUSED"

    # ------------------------------------------------------------------
    # Speech session
    # ------------------------------------------------------------------
    SPEECH_SESSION_OPENED = "SPEECH_SESSION_OPENED"
    SPEECH_CONNECT_FAILED = "SPEECH_CONNECT_FAILED"
    SPEECH_SESSION_FAILED = "SPEECH_SESSION_FAILED"
    SPEECH_SESSION_CLOSED = "SPEECH_SESSION_CLOSED"

    # ------------------------------------------------------------------
    # Talk control
    # ------------------------------------------------------------------
    TALK_PRESSED = "TALK_PRESSED"
    TALK_RELEASED = "TALK_RELEASED"


# =============================================================================
# Base Event
# =============================================================================

@dataclass(frozen=True)
class Event:
    """
    Base event type.

    All events must specify:
    - event_type: discriminant
    - ts_ms: timestamp provided by the source (or fake in tests)
    """

    event_type: EventType
    ts_ms: int


# =============================================================================
# Host Lifecycle Events
# =============================================================================

@dataclass(frozen=True)
class InitRequested(Event):
    """Host delivered onInit for this session."""
    session_id: str
    peer_addresses: tuple[str, ...] = ()


@dataclass(frozen=True)
class TeardownRequested(Event):
    """Explicit close (host endSession, disconnect or process exit)."""
    reason: str | None = None


# =============================================================================
# Permission Events
# =============================================================================

@dataclass(frozen=True)
class PermissionGranted(Event):
    """Microphone acquired."""


@dataclass(frozen=True)
class PermissionRefused(Event):
    """Microphone could not be acquired."""
    reason: str


# =============================================================================
# Speech Session Events
# =============================================================================

@dataclass(frozen=True)
class SpeechSessionOpened(Event):
    """Speech service acknowledged the session setup."""


@dataclass(frozen=True)
class SpeechConnectFailed(Event):
    """Speech session could not be established."""
    reason: str


@dataclass(frozen=True)
class SpeechSessionFailed(Event):
    """Speech session reported an error after opening."""
    reason: str


@dataclass(frozen=True)
class SpeechSessionClosed(Event):
    """Speech session closed (either side)."""
    reason: str | None = None


# =============================================================================
# Talk Control Events
# =============================================================================

@dataclass(frozen=True)
class TalkPressed(Event):
    """User pressed the push-to-talk control."""


@dataclass(frozen=True)
class TalkReleased(Event):
    """User released the push-to-talk control."""
