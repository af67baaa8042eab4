"""
Authoritative session state enumeration.

Rules:
- This enum defines ONLY the lifecycle states.
- No behavior, no helper methods, no side effects.
- Transitions are defined exclusively in the reducer.
"""

from __future__ import annotations

from enum import Enum


class State(str, Enum):
    """
    Lifecycle states for a single walkie-talkie session.

    CLOSED and ERROR are terminal: a new session is required to talk again.
    """

    UNINITIALIZED = "UNINITIALIZED"
    REQUESTING_PERMISSIONS = "REQUESTING_PERMISSIONS"
    CONNECTING = "CONNECTING"
    READY = "READY"
    RECORDING = "RECORDING"
    CLOSED = "CLOSED"
    ERROR = "ERROR"
