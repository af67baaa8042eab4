"""
Error taxonomy for the walkie-talkie relay.

- PermissionDenied: microphone could not be acquired (terminal).
- ConnectionFailure: speech session failed to open (terminal).
- DecodeFailure: a received audio payload is not valid PCM16 (per message).
- HostProtocolError: a host bridge message is malformed (per message).

Tagged messages with an unknown protocol identifier are not errors; they are
ignored where they are received.
"""

from __future__ import annotations


class WalkieTalkieError(Exception):
    """Base class for relay errors."""


class PermissionDenied(WalkieTalkieError):
    """
    Raised when the audio input device cannot be opened.

    Unrecoverable without a fresh session.
    """


class ConnectionFailure(WalkieTalkieError):
    """Raised when the speech session cannot be established."""


class DecodeFailure(WalkieTalkieError, ValueError):
    """
    Raised when a transport payload cannot be decoded into an AudioFrame.

    The payload is unsafe to play and must be dropped.
    """


class HostProtocolError(WalkieTalkieError, ValueError):
    """Raised when a host bridge message is not a valid JSON envelope."""
