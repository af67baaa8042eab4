"""
Authoritative session status container.

Rules:
- This dataclass is a pure data model.
- It contains ALL state the reducer may ever need.
- No behavior, no derived logic.
"""
from __future__ import annotations

from dataclasses import dataclass

from orchestrator.enums.state import State


@dataclass(frozen=True)
class SessionStatus:
    """Immutable snapshot of the session lifecycle."""

    state: State = State.UNINITIALIZED

    # Reason carried by ERROR (permission denial, connect failure, session error)
    last_error: str | None = None

    # Filled in by InitRequested
    session_id: str | None = None
    peer_addresses: tuple[str, ...] = ()
