"""
Application configuration.

Responsibilities:
- Load deployment-specific configuration
- Read environment variables
- Provide a typed, immutable config object

Non-responsibilities:
- No relay logic
- No protocol constants
- No runtime mutation
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from constants import (
    GEMINI_LIVE_URL,
    GEMINI_MODEL_DEFAULT,
    GEMINI_VOICE_DEFAULT,
    WALKIE_PROTOCOL_ID,
)


def _optional_device(raw: str | None) -> int | str | None:
    """PortAudio accepts either a device index or a name substring."""
    if raw is None or raw == "":
        return None
    if raw.isdigit():
        return int(raw)
    return raw


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Constructed once at process startup.
    Passed downward to the session gateway and session factory.
    """

    # ------------------------------------------------------------------
    # Speech recognition (Gemini Live)
    # ------------------------------------------------------------------

    gemini_api_key: str | None
    gemini_model: str
    gemini_voice: str
    gemini_live_url: str

    # ------------------------------------------------------------------
    # Peer protocol / transport
    # ------------------------------------------------------------------

    protocol_id: str
    loopback_transport: bool

    # ------------------------------------------------------------------
    # Audio devices
    # ------------------------------------------------------------------

    audio_input_device: int | str | None
    audio_output_device: int | str | None

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    enable_json_logs: bool

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> AppConfig:
        """
        Load configuration from environment variables.

        Missing values fall back to defaults; GEMINI_API_KEY is checked when
        a speech session is actually built.
        """
        return AppConfig(
            gemini_api_key=os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY"),
            gemini_model=os.environ.get("GEMINI_MODEL", GEMINI_MODEL_DEFAULT),
            gemini_voice=os.environ.get("GEMINI_VOICE", GEMINI_VOICE_DEFAULT),
            gemini_live_url=os.environ.get("GEMINI_LIVE_URL", GEMINI_LIVE_URL),

            protocol_id=os.environ.get("WALKIE_PROTOCOL_ID", WALKIE_PROTOCOL_ID),
            loopback_transport=os.environ.get("LOOPBACK_TRANSPORT", "0") == "1",

            audio_input_device=_optional_device(os.environ.get("AUDIO_INPUT_DEVICE")),
            audio_output_device=_optional_device(os.environ.get("AUDIO_OUTPUT_DEVICE")),

            enable_json_logs=os.environ.get("ENABLE_JSON_LOGS", "1") == "1",
        )
