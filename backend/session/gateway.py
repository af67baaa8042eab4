"""
Session gateway.

Responsibilities:
- One host WebSocket connection == one gateway == at most one WalkieSession
- Decode inbound host JSON and route it:
    init                  -> create the session and start initialization
    talkPress/talkRelease -> push-to-talk control
    endSession            -> teardown
    peer/storage traffic  -> the session's transport
- Publish status and transcript changes as outbound host messages
- Tear the session down when the host disconnects
- In loopback mode, stand in for the host init after onload

NOT responsible for:
- Any state machine logic (reducer)
- Executing commands (runtime)
- Constructing devices or adapters (session factory)
"""

from __future__ import annotations

import asyncio
from typing import Any, TYPE_CHECKING

from constants import LOOPBACK_INIT_DELAY_S, LOOPBACK_SESSION_ID, LOOPBACK_USER_ADDRESSES
from context.serialization import serialize_entry
from context.transcript import TranscriptEntry
from errors import HostProtocolError
from observability.logger import log_event, now_ms
from orchestrator.state_dataclass import SessionStatus
from orchestrator.status import status_text, talk_enabled
from protocol.host import (
    HostEndSession,
    HostInit,
    HostMessage,
    HostTalkPress,
    HostTalkRelease,
    decode_host_message,
    encode_onload,
    encode_status,
    encode_transcript_entry,
)
from session.walkie_session import WalkieSession
from transport.host_bridge import HostBridgeTransport

if TYPE_CHECKING:
    from config import AppConfig
    from session.factory import SessionFactory


class SessionGateway:
    """Bridges one host connection to one walkie-talkie session."""

    def __init__(
        self,
        *,
        config: AppConfig,
        session_factory: SessionFactory,
    ) -> None:
        self._config = config
        self._session_factory = session_factory
        self.session: WalkieSession | None = None

        # Drained to the host socket by the /ws route
        self.outbound: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._auto_init_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def on_ws_connect(self) -> None:
        """Announce readiness; the host answers with init."""
        log_event({
            "ts_ms": now_ms(),
            "event_type": "HOST_CONNECTED",
        })
        self.outbound.put_nowait(encode_onload())

        if self._config.loopback_transport:
            # No host on the other end to answer onload
            self._auto_init_task = asyncio.create_task(self._auto_init())

    async def on_ws_disconnect(self, reason: str | None = None) -> None:
        if self._auto_init_task is not None:
            self._auto_init_task.cancel()
            self._auto_init_task = None

        if self.session is None:
            log_event({
                "ts_ms": now_ms(),
                "event_type": "HOST_DISCONNECT_WITHOUT_SESSION",
                "reason": reason,
            })
            return

        await self.session.close(reason)

    # ------------------------------------------------------------------
    # Inbound routing
    # ------------------------------------------------------------------

    async def on_json_message(self, payload: str) -> None:
        try:
            msg = decode_host_message(payload)
        except HostProtocolError as e:
            log_event({
                "ts_ms": now_ms(),
                "event_type": "HOST_DECODE_ERROR",
                "session_id": self.session.session_id if self.session else None,
                "error": str(e),
                "payload_preview": payload[:100],
            })
            return

        if isinstance(msg, HostInit):
            self._on_init(msg)
            return

        session = self.session
        if session is None:
            log_event({
                "ts_ms": now_ms(),
                "event_type": "MESSAGE_WITHOUT_SESSION",
                "message": type(msg).__name__,
            })
            return

        if isinstance(msg, HostTalkPress):
            session.press()
        elif isinstance(msg, HostTalkRelease):
            session.release()
        elif isinstance(msg, HostEndSession):
            await session.close("host_end_session")
        else:
            self._route_transport_traffic(session, msg)

    async def _auto_init(self) -> None:
        await asyncio.sleep(LOOPBACK_INIT_DELAY_S)
        self._auto_init_task = None
        if self.session is None:
            self._on_init(HostInit(
                session_id=LOOPBACK_SESSION_ID,
                user_addresses=LOOPBACK_USER_ADDRESSES,
            ))

    def _on_init(self, msg: HostInit) -> None:
        if self.session is not None:
            log_event({
                "ts_ms": now_ms(),
                "event_type": "DUPLICATE_INIT_IGNORED",
                "session_id": self.session.session_id,
                "requested_session_id": msg.session_id,
            })
            return

        components = self._session_factory(msg.session_id, self.outbound)
        self.session = WalkieSession(
            msg.session_id,
            microphone=components.microphone,
            speaker=components.speaker,
            speech_adapter=components.speech_adapter,
            transport=components.transport,
            protocol_id=self._config.protocol_id,
            on_status=self._publish_status,
            on_transcript=self._publish_transcript_entry,
        )

        log_event({
            "ts_ms": now_ms(),
            "event_type": "SESSION_CREATED",
            "session_id": msg.session_id,
            "peer_count": len(msg.user_addresses),
            "transport": type(components.transport).__name__,
        })

        self.session.start(msg.user_addresses)

    def _route_transport_traffic(self, session: WalkieSession, msg: HostMessage) -> None:
        transport = session.transport
        if isinstance(transport, HostBridgeTransport) and transport.deliver(msg):
            return
        log_event({
            "ts_ms": now_ms(),
            "event_type": "HOST_MESSAGE_IGNORED",
            "session_id": session.session_id,
            "message": type(msg).__name__,
            "transport": type(transport).__name__,
        })

    # ------------------------------------------------------------------
    # Outbound publication
    # ------------------------------------------------------------------

    def _publish_status(self, status: SessionStatus) -> None:
        self.outbound.put_nowait(encode_status(
            state=status.state.value,
            status=status_text(status),
            talk_enabled=talk_enabled(status),
        ))

    def _publish_transcript_entry(self, entry: TranscriptEntry) -> None:
        self.outbound.put_nowait(encode_transcript_entry(serialize_entry(entry)))
