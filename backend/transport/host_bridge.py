"""
Peer transport backed by the host bridge WebSocket.

Outbound calls become host JSON messages on an asyncio queue that the /ws
route drains to the socket. Inbound host messages carrying peer or storage
traffic are handed to deliver(), which routes them to the bound sink.
"""

from __future__ import annotations

import asyncio
from typing import Any

from observability.logger import log_event, now_ms
from protocol.host import (
    HostMessage,
    HostNetworkData,
    HostNetworkProtocolData,
    HostStorageData,
    encode_get_storage_data,
    encode_send_network_data,
    encode_send_network_protocol_data,
    encode_set_storage_data,
)
from transport.base import PeerTransport


class HostBridgeTransport(PeerTransport):
    def __init__(self, outbound: asyncio.Queue[dict[str, Any]]) -> None:
        super().__init__()
        self._outbound = outbound

    def send_raw(self, data: str) -> None:
        self._outbound.put_nowait(encode_send_network_data(data))

    def send_tagged(self, protocol_id: str, data: str) -> None:
        self._outbound.put_nowait(encode_send_network_protocol_data(protocol_id, data))

    def request_storage(self, key: str) -> None:
        self._outbound.put_nowait(encode_get_storage_data(key))

    def set_storage(self, key: str, value: Any) -> None:
        self._outbound.put_nowait(encode_set_storage_data(key, value))

    def deliver(self, msg: HostMessage) -> bool:
        """
        Route an inbound host message to the bound sink.

        Returns:
            True if msg was peer/storage traffic (delivered or dropped),
            False if it is not transport traffic at all.
        """
        if not isinstance(msg, (HostNetworkData, HostNetworkProtocolData, HostStorageData)):
            return False

        sink = self._sink
        if sink is None:
            log_event({
                "ts_ms": now_ms(),
                "event_type": "INBOUND_WITHOUT_SINK",
                "message": type(msg).__name__,
            })
            return True

        if isinstance(msg, HostNetworkData):
            sink.on_network_data(msg.sender, msg.data)
        elif isinstance(msg, HostNetworkProtocolData):
            sink.on_network_protocol_data(msg.sender, msg.protocol_id, msg.data)
        else:
            sink.on_storage_data(msg.key, msg.value)
        return True
