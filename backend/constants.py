"""
CONSTANTS
---------
Single source of truth for all behavioral values in the relay.

Rules:
- If changing a value changes runtime behavior, it belongs here.
- No magic numbers elsewhere in the codebase.
- Other modules MUST import from this file.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# Audio Format (PCM16 mono @ 16kHz)
# =============================================================================

AUDIO_SAMPLE_RATE_HZ: Final[int] = 16_000
AUDIO_CHANNELS: Final[int] = 1
AUDIO_SAMPLE_WIDTH_BYTES: Final[int] = 2  # PCM16 (signed 16-bit)

# Float <-> int16 scale. Samples are multiplied by this on capture and
# divided by it on playback.
PCM16_SCALE: Final[float] = 32768.0

AUDIO_MIME_TYPE: Final[str] = f"audio/pcm;rate={AUDIO_SAMPLE_RATE_HZ}"

# =============================================================================
# Capture cadence
# =============================================================================

# Hardware block size per capture tick (~256ms at 16kHz).
CAPTURE_BLOCK_SAMPLES: Final[int] = 4096
CAPTURE_INPUT_CHANNELS: Final[int] = 1

# =============================================================================
# Peer protocol
# =============================================================================

WALKIE_PROTOCOL_ID: Final[str] = "com.ixilabs.spixi.walkie-talkie"

# Loopback transport delay (mirrors the host SDK's test mode)
LOOPBACK_DELAY_S: Final[float] = 0.05
LOOPBACK_PEER_ADDRESS: Final[str] = "test-peer-address"

# Loopback mode also stands in for the host init handshake
LOOPBACK_INIT_DELAY_S: Final[float] = 0.1
LOOPBACK_SESSION_ID: Final[str] = "test-session-id"
LOOPBACK_USER_ADDRESSES: Final[tuple[str, ...]] = ("test-user-address1", "test-user-address2")

# =============================================================================
# Speech session (Gemini Live)
# =============================================================================

GEMINI_LIVE_URL: Final[str] = (
    "wss://generativelanguage.googleapis.com/ws/"
    "google.ai.generativelanguage.v1beta.GenerativeService.BidiGenerateContent"
)
GEMINI_MODEL_DEFAULT: Final[str] = "gemini-2.5-flash-native-audio-preview-09-2025"
GEMINI_VOICE_DEFAULT: Final[str] = "Zephyr"
GEMINI_SYSTEM_INSTRUCTION: Final[str] = (
    "You are a transcription service. "
    "Your only job is to transcribe the user's audio accurately."
)
GEMINI_WS_MAX_SIZE: Final[int] = 2**22

# =============================================================================
# User-visible status strings
# =============================================================================

STATUS_UNINITIALIZED: Final[str] = "Initializing..."
STATUS_REQUESTING_PERMISSIONS: Final[str] = "Requesting Permissions..."
STATUS_CONNECTING: Final[str] = "Connecting to Gemini..."
STATUS_READY: Final[str] = "Ready"
STATUS_RECORDING: Final[str] = "Recording..."
STATUS_CLOSED: Final[str] = "Connection Closed"
STATUS_ERROR_PREFIX: Final[str] = "Error: "

PERMISSION_DENIED_REASON: Final[str] = (
    "Could not initialize. Please check permissions and refresh."
)
