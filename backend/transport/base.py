"""
Peer transport contract.

The transport carries two kinds of payload to the other participants:
- raw strings (base64 PCM16 audio), untagged
- strings tagged with an application protocol identifier (transcripts)

Inbound traffic is delivered to whatever InboundSink is bound. Delivery is
best-effort: no acknowledgement, no ordering guarantee across senders.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol


class InboundSink(Protocol):
    """Receiver of peer and host storage traffic."""

    def on_network_data(self, sender: str, data: Any) -> None: ...
    def on_network_protocol_data(self, sender: str, protocol_id: str, data: Any) -> None: ...
    def on_storage_data(self, key: str, value: Any) -> None: ...


class PeerTransport(ABC):
    """Abstract send side of the peer link, plus inbound binding."""

    def __init__(self) -> None:
        self._sink: InboundSink | None = None

    def bind(self, sink: InboundSink | None) -> None:
        """Route inbound traffic to sink (None unbinds)."""
        self._sink = sink

    @property
    def sink(self) -> InboundSink | None:
        return self._sink

    @abstractmethod
    def send_raw(self, data: str) -> None:
        """Send an untagged payload to every peer."""
        raise NotImplementedError

    @abstractmethod
    def send_tagged(self, protocol_id: str, data: str) -> None:
        """Send a payload tagged with an application protocol identifier."""
        raise NotImplementedError

    @abstractmethod
    def request_storage(self, key: str) -> None:
        """Ask the host for a stored value; it arrives via on_storage_data."""
        raise NotImplementedError

    @abstractmethod
    def set_storage(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Stop any outbound work still in flight. Default: nothing to stop."""
