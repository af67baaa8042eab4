"""
Loopback peer transport.

Echoes every sent payload back to the bound sink after a short delay, as if a
peer at LOOPBACK_PEER_ADDRESS had sent it. Used to exercise the full relay on
one machine (LOOPBACK_TRANSPORT=1) and in tests.
"""

from __future__ import annotations

import asyncio
from typing import Any

from constants import LOOPBACK_DELAY_S, LOOPBACK_PEER_ADDRESS
from observability.logger import log_event, now_ms
from transport.base import PeerTransport


class LoopbackTransport(PeerTransport):
    def __init__(
        self,
        *,
        delay_s: float = LOOPBACK_DELAY_S,
        peer_address: str = LOOPBACK_PEER_ADDRESS,
    ) -> None:
        super().__init__()
        self._delay_s = delay_s
        self._peer_address = peer_address
        self._storage: dict[str, Any] = {}
        self._pending: set[asyncio.TimerHandle] = set()

    def send_raw(self, data: str) -> None:
        self._later(self._deliver_raw, data)

    def send_tagged(self, protocol_id: str, data: str) -> None:
        self._later(self._deliver_tagged, protocol_id, data)

    def request_storage(self, key: str) -> None:
        self._later(self._deliver_storage, key)

    def set_storage(self, key: str, value: Any) -> None:
        self._storage[key] = value

    def close(self) -> None:
        """Drop echoes that have not been delivered yet."""
        for handle in self._pending:
            handle.cancel()
        self._pending.clear()

    # -------------------------------------------------------------------------

    def _later(self, callback: Any, *args: Any) -> None:
        loop = asyncio.get_running_loop()
        handle: asyncio.TimerHandle

        def fire() -> None:
            self._pending.discard(handle)
            callback(*args)

        handle = loop.call_later(self._delay_s, fire)
        self._pending.add(handle)

    def _deliver_raw(self, data: str) -> None:
        if self._sink is None:
            self._log_unbound()
            return
        self._sink.on_network_data(self._peer_address, data)

    def _deliver_tagged(self, protocol_id: str, data: str) -> None:
        if self._sink is None:
            self._log_unbound()
            return
        self._sink.on_network_protocol_data(self._peer_address, protocol_id, data)

    def _deliver_storage(self, key: str) -> None:
        if self._sink is None:
            self._log_unbound()
            return
        self._sink.on_storage_data(key, self._storage.get(key))

    @staticmethod
    def _log_unbound() -> None:
        log_event({
            "ts_ms": now_ms(),
            "event_type": "LOOPBACK_WITHOUT_SINK",
        })
