"""
Gemini Live speech-to-text adapter.

One BidiGenerateContent WebSocket per session. The model is instructed to act
purely as a transcriber; only the server-side input transcription is used.

Wire protocol (JSON text or binary frames, one object per frame):

    -> {"setup": {...}}                              once, right after connect
    <- {"setupComplete": {}}                         session usable
    -> {"realtimeInput": {"audio": {"mimeType", "data"}}}
    <- {"serverContent": {"inputTranscription": {"text": "..."}}}
    <- {"serverContent": {"turnComplete": true}}

Model audio replies (serverContent.modelTurn) are ignored.

Connection lifecycle:
- open() connects, sends setup and starts the receive and send loops
- send_audio() enqueues; a single sender task drains the queue in order
- a clean close is reported once as on_session_closed, anything else once as
  on_session_error
- no reconnects
"""

from __future__ import annotations

import asyncio
import json
from contextlib import suppress
from typing import Any, Awaitable, Callable

from websockets.asyncio.client import ClientConnection, connect as ws_connect
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK

from adapters.speech.base import SpeechAdapter, SpeechEventSink
from audio.frames import EncodedChunk
from constants import (
    GEMINI_LIVE_URL,
    GEMINI_MODEL_DEFAULT,
    GEMINI_SYSTEM_INSTRUCTION,
    GEMINI_VOICE_DEFAULT,
    GEMINI_WS_MAX_SIZE,
)
from errors import ConnectionFailure
from observability.logger import log_event, now_ms


Connector = Callable[..., Awaitable[ClientConnection]]


class GeminiLiveAdapter(SpeechAdapter):
    """Streams captured audio to Gemini Live and reports input transcription."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str = GEMINI_MODEL_DEFAULT,
        voice: str = GEMINI_VOICE_DEFAULT,
        url: str = GEMINI_LIVE_URL,
        system_instruction: str = GEMINI_SYSTEM_INSTRUCTION,
        session_id: str | None = None,
        connect: Connector = ws_connect,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._voice = voice
        self._url = url
        self._system_instruction = system_instruction
        self._session_id = session_id
        self._connect = connect

        self._ws: ClientConnection | None = None
        self._sink: SpeechEventSink | None = None
        self._outbox: asyncio.Queue[EncodedChunk] = asyncio.Queue()
        self._recv_task: asyncio.Task[None] | None = None
        self._send_task: asyncio.Task[None] | None = None

        # Set once the session outcome has been reported or close() was called
        self._finished: bool = False

        self.chunks_sent: int = 0

    # -------------------------------------------------------------------------
    # SpeechAdapter
    # -------------------------------------------------------------------------

    async def open(self, sink: SpeechEventSink) -> None:
        if self._ws is not None or self._finished:
            raise ConnectionFailure("speech session already used")

        try:
            ws = await self._connect(
                f"{self._url}?key={self._api_key}",
                max_size=GEMINI_WS_MAX_SIZE,
            )
        except Exception as e:  # pylint: disable=broad-exception-caught
            # Exception text may echo the URL; keep the key out of it.
            raise ConnectionFailure(f"gemini_connect_failed: {type(e).__name__}") from e

        if self._finished:
            await _close_quietly(ws)
            raise ConnectionFailure("speech session closed while connecting")

        try:
            await ws.send(json.dumps(self.setup_message()))
        except Exception as e:  # pylint: disable=broad-exception-caught
            await _close_quietly(ws)
            raise ConnectionFailure(f"gemini_setup_failed: {e!r}") from e

        if self._finished:
            # Released while the setup message was in flight
            await _close_quietly(ws)
            raise ConnectionFailure("speech session closed while connecting")

        self._ws = ws
        self._sink = sink
        self._recv_task = asyncio.create_task(self._recv_loop(ws))
        self._send_task = asyncio.create_task(self._send_loop(ws))

        log_event({
            "ts_ms": now_ms(),
            "event_type": "SPEECH_SESSION_CONNECTED",
            "session_id": self._session_id,
            "model": self._model,
        })

    def send_audio(self, chunk: EncodedChunk) -> None:
        if self._ws is None or self._finished:
            log_event({
                "ts_ms": now_ms(),
                "event_type": "SPEECH_AUDIO_DROPPED",
                "session_id": self._session_id,
                "reason": "session_not_open",
            })
            return
        self._outbox.put_nowait(chunk)

    async def close(self) -> None:
        self._finished = True

        ws = self._ws
        self._ws = None

        tasks = [t for t in (self._send_task, self._recv_task) if t is not None]
        self._send_task = None
        self._recv_task = None
        for task in tasks:
            task.cancel()
        for task in tasks:
            if task is asyncio.current_task():
                continue
            with suppress(asyncio.CancelledError):
                await task

        if ws is not None:
            await _close_quietly(ws)

    # -------------------------------------------------------------------------
    # Wire messages
    # -------------------------------------------------------------------------

    def setup_message(self) -> dict[str, Any]:
        return {
            "setup": {
                "model": f"models/{self._model}",
                "generationConfig": {
                    "responseModalities": ["AUDIO"],
                    "speechConfig": {
                        "voiceConfig": {
                            "prebuiltVoiceConfig": {"voiceName": self._voice},
                        },
                    },
                },
                "systemInstruction": {
                    "parts": [{"text": self._system_instruction}],
                },
                "inputAudioTranscription": {},
            }
        }

    @staticmethod
    def audio_message(chunk: EncodedChunk) -> dict[str, Any]:
        return {
            "realtimeInput": {
                "audio": {"mimeType": chunk.mime_type, "data": chunk.data},
            }
        }

    # -------------------------------------------------------------------------
    # Background loops
    # -------------------------------------------------------------------------

    async def _send_loop(self, ws: ClientConnection) -> None:
        while True:
            chunk = await self._outbox.get()
            try:
                await ws.send(json.dumps(self.audio_message(chunk)))
            except asyncio.CancelledError:
                raise
            except Exception as e:  # pylint: disable=broad-exception-caught
                self._report_error(f"gemini_send_failed: {e!r}")
                return
            self.chunks_sent += 1

    async def _recv_loop(self, ws: ClientConnection) -> None:
        try:
            async for raw in ws:
                try:
                    data = json.loads(raw)
                except ValueError as e:
                    log_event({
                        "ts_ms": now_ms(),
                        "event_type": "SPEECH_MESSAGE_DECODE_ERROR",
                        "session_id": self._session_id,
                        "error": str(e),
                    })
                    continue

                if isinstance(data, dict):
                    self._handle_message(data)
        except asyncio.CancelledError:
            return
        except ConnectionClosedOK as e:
            self._report_closed(e.rcvd.reason if e.rcvd else None)
            return
        except ConnectionClosed as e:
            self._report_error(f"gemini_connection_lost: {e}")
            return
        except Exception as e:  # pylint: disable=broad-exception-caught
            self._report_error(f"gemini_recv_failed: {e!r}")
            return

        # Iteration ends without raising on a normal close
        self._report_closed(ws.close_reason)

    def _handle_message(self, data: dict[str, Any]) -> None:
        if self._finished or self._sink is None:
            return

        if "setupComplete" in data:
            self._sink.on_session_opened()

        content = data.get("serverContent")
        if isinstance(content, dict):
            transcription = content.get("inputTranscription")
            if isinstance(transcription, dict):
                text = transcription.get("text")
                if isinstance(text, str):
                    self._sink.on_partial_transcription(text)

            # Transcription in the same message belongs to the finishing turn
            if content.get("turnComplete"):
                self._sink.on_turn_complete()

        if "goAway" in data:
            log_event({
                "ts_ms": now_ms(),
                "event_type": "SPEECH_SESSION_GO_AWAY",
                "session_id": self._session_id,
                "details": data.get("goAway"),
            })

    # -------------------------------------------------------------------------
    # Outcome reporting (at most once)
    # -------------------------------------------------------------------------

    def _report_closed(self, reason: str | None) -> None:
        if self._finished or self._sink is None:
            return
        self._finished = True
        self._sink.on_session_closed(reason or None)

    def _report_error(self, reason: str) -> None:
        if self._finished or self._sink is None:
            return
        self._finished = True
        self._sink.on_session_error(reason)


async def _close_quietly(ws: ClientConnection) -> None:
    try:
        await ws.close()
    except Exception as e:  # pylint: disable=broad-exception-caught
        log_event({
            "ts_ms": now_ms(),
            "event_type": "SPEECH_CLOSE_FAILED",
            "error": repr(e),
        })
