"""
Pure session reducer.

(status, event) -> (new_status, commands)

Rules:
- Pure: no side effects, no IO, no clocks.
- Deterministic: output depends only on inputs.
- Total: every (state, event) pair is handled or explicitly ignored (logged).

Lifecycle:

    UNINITIALIZED -> REQUESTING_PERMISSIONS -> CONNECTING -> READY <-> RECORDING
    any non-terminal --(failure)--> ERROR(reason)
    any non-terminal --(close)----> CLOSED

CLOSED and ERROR are terminal.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from orchestrator.commands import (
    Command,
    LogEvent,
    OpenSpeechSession,
    PublishStatus,
    ReleaseResources,
    RequestPermissions,
    StartCapture,
)
from orchestrator.enums.state import State
from orchestrator.events import (
    Event,
    InitRequested,
    PermissionGranted,
    PermissionRefused,
    SpeechConnectFailed,
    SpeechSessionClosed,
    SpeechSessionFailed,
    SpeechSessionOpened,
    TalkPressed,
    TalkReleased,
    TeardownRequested,
)
from orchestrator.state_dataclass import SessionStatus


TERMINAL_STATES: frozenset[State] = frozenset({State.CLOSED, State.ERROR})


# =============================================================================
# Small helpers
# =============================================================================

def _log(
    status: SessionStatus,
    event: Event,
    decision: str,
    details: dict[str, Any] | None = None,
) -> LogEvent:
    return LogEvent(
        event={
            "ts_ms": event.ts_ms,
            "session_id": status.session_id,
            "state": status.state.value,
            "event_type": event.event_type.value,
            "decision": decision,
            "last_error": status.last_error,
            "details": details or {},
        }
    )


def _ignore(
    status: SessionStatus, event: Event, reason: str
) -> tuple[SessionStatus, tuple[Command, ...]]:
    return status, (_log(status, event, "ignore", {"reason": reason}),)


def _transition(
    status: SessionStatus,
    new_status: SessionStatus,
    event: Event,
    source: str,
    *side_effects: Command,
) -> tuple[SessionStatus, tuple[Command, ...]]:
    """State change: side effects first, then status publication, then the log."""
    return new_status, side_effects + (
        PublishStatus(),
        _log(
            new_status,
            event,
            "state_changed",
            {
                "from_state": status.state.value,
                "to_state": new_status.state.value,
                "source": source,
            },
        ),
    )


def _enter_error(
    status: SessionStatus, event: Event, reason: str, source: str
) -> tuple[SessionStatus, tuple[Command, ...]]:
    new_status = replace(status, state=State.ERROR, last_error=reason)
    return _transition(status, new_status, event, source, ReleaseResources())


def _enter_closed(
    status: SessionStatus, event: Event, source: str
) -> tuple[SessionStatus, tuple[Command, ...]]:
    new_status = replace(status, state=State.CLOSED)
    return _transition(status, new_status, event, source, ReleaseResources())


# =============================================================================
# Reducer
# =============================================================================

def reduce(
    status: SessionStatus, event: Event
) -> tuple[SessionStatus, tuple[Command, ...]]:
    """
    Pure reducer for the walkie-talkie lifecycle.

    Given the current status and a single event, returns:
    - the next status
    - a tuple of commands describing required side effects

    Properties:
    - Deterministic: no IO, clocks, or randomness
    - Total: every (state, event) pair is handled or explicitly ignored
    - Terminal: nothing leaves CLOSED or ERROR
    """
    state = status.state

    if state in TERMINAL_STATES:
        return _ignore(status, event, f"terminal_state_{state.value.lower()}")

    # ------------------------------------------------------------------
    # Failures and close: accepted from every non-terminal state
    # ------------------------------------------------------------------

    if isinstance(event, PermissionRefused):
        return _enter_error(status, event, event.reason, "permission_refused")

    if isinstance(event, SpeechConnectFailed):
        return _enter_error(status, event, event.reason, "speech_connect_failed")

    if isinstance(event, SpeechSessionFailed):
        return _enter_error(status, event, event.reason, "speech_session_failed")

    if isinstance(event, SpeechSessionClosed):
        return _enter_closed(status, event, "speech_session_closed")

    if isinstance(event, TeardownRequested):
        return _enter_closed(status, event, "teardown_requested")

    # ------------------------------------------------------------------
    # Forward progress
    # ------------------------------------------------------------------

    if isinstance(event, InitRequested):
        if state is not State.UNINITIALIZED:
            return _ignore(status, event, "already_initialized")
        new_status = replace(
            status,
            state=State.REQUESTING_PERMISSIONS,
            session_id=event.session_id,
            peer_addresses=event.peer_addresses,
        )
        return _transition(status, new_status, event, "init_requested", RequestPermissions())

    if isinstance(event, PermissionGranted):
        if state is not State.REQUESTING_PERMISSIONS:
            return _ignore(status, event, "not_requesting_permissions")
        new_status = replace(status, state=State.CONNECTING)
        return _transition(status, new_status, event, "permission_granted", OpenSpeechSession())

    if isinstance(event, SpeechSessionOpened):
        if state is not State.CONNECTING:
            return _ignore(status, event, "not_connecting")
        new_status = replace(status, state=State.READY)
        return _transition(status, new_status, event, "speech_session_opened", StartCapture())

    # ------------------------------------------------------------------
    # Push-to-talk
    # ------------------------------------------------------------------

    if isinstance(event, TalkPressed):
        if state is not State.READY:
            return _ignore(status, event, "press_requires_ready")
        return _transition(status, replace(status, state=State.RECORDING), event, "talk_pressed")

    if isinstance(event, TalkReleased):
        if state is not State.RECORDING:
            return _ignore(status, event, "release_requires_recording")
        return _transition(status, replace(status, state=State.READY), event, "talk_released")

    return _ignore(status, event, "unhandled_event")
