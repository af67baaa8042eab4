"""
Side-effect command definitions for the session reducer.

Rules:
- Commands are declarative requests for side effects.
- Commands are emitted by the reducer and executed by the runtime.
- No behavior, no async, no I/O, no clocks.
Invariant:
    - All concrete Command subclasses MUST be frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


# =============================================================================
# Command Type Enumeration
# =============================================================================

class CommandType(str, Enum):
    """
    Canonical command types emitted by the reducer.

    These are stable discriminants used for logging and runtime dispatch.
    """

    # Lifecycle
    REQUEST_PERMISSIONS = "REQUEST_PERMISSIONS"
    OPEN_SPEECH_SESSION = "OPEN_SPEECH_SESSION"
    START_CAPTURE = "START_CAPTURE"
    RELEASE_RESOURCES = "RELEASE_RESOURCES"

    # Display
    PUBLISH_STATUS = "PUBLISH_STATUS"

    # Observability
    LOG_EVENT = "LOG_EVENT"


# =============================================================================
# Base Command
# =============================================================================

class Command:
    """
    Base command type.

    command_type is an explicit discriminant and must never be inferred
    from Python type identity.
    """

    command_type: CommandType


# =============================================================================
# Lifecycle Commands
# =============================================================================

@dataclass(frozen=True)
class RequestPermissions(Command):
    """Acquire the microphone."""
    command_type: CommandType = CommandType.REQUEST_PERMISSIONS


@dataclass(frozen=True)
class OpenSpeechSession(Command):
    """Open the output device and connect the speech session."""
    command_type: CommandType = CommandType.OPEN_SPEECH_SESSION


@dataclass(frozen=True)
class StartCapture(Command):
    """Start delivering microphone blocks to the capture pipeline."""
    command_type: CommandType = CommandType.START_CAPTURE


@dataclass(frozen=True)
class ReleaseResources(Command):
    """Stop the microphone, close the output device and the speech session."""
    command_type: CommandType = CommandType.RELEASE_RESOURCES


# =============================================================================
# Display / Observability Commands
# =============================================================================

@dataclass(frozen=True)
class PublishStatus(Command):
    """Push the current status string to the display layer."""
    command_type: CommandType = CommandType.PUBLISH_STATUS


@dataclass(frozen=True)
class LogEvent(Command):
    """Request to emit a structured observability event."""
    event: dict[str, Any]
    command_type: CommandType = CommandType.LOG_EVENT
