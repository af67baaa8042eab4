"""
Read-only views of SessionStatus for the capture path and the display layer.
"""

from __future__ import annotations

from constants import (
    STATUS_CLOSED,
    STATUS_CONNECTING,
    STATUS_ERROR_PREFIX,
    STATUS_READY,
    STATUS_RECORDING,
    STATUS_REQUESTING_PERMISSIONS,
    STATUS_UNINITIALIZED,
)
from orchestrator.enums.state import State
from orchestrator.state_dataclass import SessionStatus


_STATUS_TEXT: dict[State, str] = {
    State.UNINITIALIZED: STATUS_UNINITIALIZED,
    State.REQUESTING_PERMISSIONS: STATUS_REQUESTING_PERMISSIONS,
    State.CONNECTING: STATUS_CONNECTING,
    State.READY: STATUS_READY,
    State.RECORDING: STATUS_RECORDING,
    State.CLOSED: STATUS_CLOSED,
}


def is_armed(status: SessionStatus) -> bool:
    """Capture is transmitted only while recording."""
    return status.state is State.RECORDING


def talk_enabled(status: SessionStatus) -> bool:
    """The talk control is usable only in READY or RECORDING."""
    return status.state in (State.READY, State.RECORDING)


def status_text(status: SessionStatus) -> str:
    """Single human-readable status line."""
    if status.state is State.ERROR:
        return f"{STATUS_ERROR_PREFIX}{status.last_error or 'unknown'}"
    return _STATUS_TEXT[status.state]
